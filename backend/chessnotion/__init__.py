"""Import chess games from Chess.com, Lichess or pasted PGN into Notion."""
