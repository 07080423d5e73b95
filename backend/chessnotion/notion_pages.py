"""
Notion page layout for an imported game.

Property names match the columns of the user's game-log database.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List

from .game_data import LOSS, UNKNOWN, WIN, ProcessedGame

PROP_MATCHUP = '매치업'
PROP_DATE = '날짜'
PROP_PLATFORM = '플랫폼'
PROP_TYPE = '유형'
PROP_COLOR = '색'
PROP_RESULT = '결과'
PROP_TIME_CLASS = '타임 카테고리'
PROP_TIME_CONTROL = '타임 컨트롤'
PROP_LINK = '링크'
PROP_MY_RATING_DIFF = '내 레이팅 변동'
PROP_OPPONENT_RATING_DIFF = '상대 레이팅 변동'
PROP_MY_RATING = '최종 레이팅'
PROP_OPPONENT_RATING = '상대 최종 레이팅'
PROP_WHITE = '백'
PROP_BLACK = '흑'

TYPE_RATED = '레이팅'
TYPE_CASUAL = '캐주얼'
RESULT_LABELS = {WIN: '승리', LOSS: '패배'}
RESULT_DRAW_LABEL = '무승부'

RICH_TEXT_LIMIT = 2000


def platform_label(game: ProcessedGame) -> str:
    """Platform parsed from the game, else guessed from its URL."""
    if game.platform != UNKNOWN:
        return game.platform
    url = (game.url or '').lower()
    if 'lichess.org' in url:
        return 'Lichess'
    if 'chess.com' in url:
        return 'Chess.com'
    return UNKNOWN


def to_rich_text_chunks(text: str, chunk_size: int = RICH_TEXT_LIMIT) -> List[Dict[str, Any]]:
    """Notion caps a rich-text item at 2000 characters."""
    return [
        {'type': 'text', 'text': {'content': text[i:i + chunk_size]}}
        for i in range(0, len(text), chunk_size)
    ]


def _text(content: str) -> List[Dict[str, Any]]:
    return [{'type': 'text', 'text': {'content': content}}]


def _select(name: str) -> Dict[str, Any]:
    return {'select': {'name': name}}


def build_page_properties(game: ProcessedGame) -> Dict[str, Any]:
    me = game.player(game.user_color) or game.white
    opponent = game.opponent(game.user_color) or game.black
    played_at = datetime.fromtimestamp(game.end_time, tz=timezone.utc)

    return {
        PROP_MATCHUP: {'title': _text(f"⚪ {game.white.username} 🆚 ⚫ {game.black.username}")},
        PROP_DATE: {'date': {'start': played_at.isoformat()}},
        PROP_PLATFORM: _select(platform_label(game)),
        PROP_TYPE: _select(TYPE_RATED if game.rated else TYPE_CASUAL),
        PROP_COLOR: _select(game.user_color),
        PROP_RESULT: _select(RESULT_LABELS.get(game.user_result, RESULT_DRAW_LABEL)),
        PROP_TIME_CLASS: _select(game.time_class),
        PROP_TIME_CONTROL: _select(game.time_control),
        PROP_LINK: {'url': game.url or None},
        PROP_MY_RATING_DIFF: {'number': me.rating_diff},
        PROP_OPPONENT_RATING_DIFF: {'number': opponent.rating_diff},
        PROP_MY_RATING: {'number': me.rating},
        PROP_OPPONENT_RATING: {'number': opponent.rating},
        PROP_WHITE: {'rich_text': _text(game.white.username)},
        PROP_BLACK: {'rich_text': _text(game.black.username)},
    }


def _heading(level: int, content: str) -> Dict[str, Any]:
    key = f'heading_{level}'
    return {'object': 'block', 'type': key, key: {'rich_text': _text(content)}}


def _empty_block(block_type: str) -> Dict[str, Any]:
    return {'object': 'block', 'type': block_type, block_type: {'rich_text': []}}


def build_page_children(game: ProcessedGame) -> List[Dict[str, Any]]:
    """PGN toggle followed by the post-game review template."""
    return [
        {
            'object': 'block', 'type': 'toggle',
            'toggle': {
                'rich_text': _text('PGN'),
                'children': [{
                    'object': 'block', 'type': 'code',
                    'code': {'language': 'plain text', 'rich_text': to_rich_text_chunks(game.pgn)},
                }],
            },
        },
        {'object': 'block', 'type': 'divider', 'divider': {}},
        _heading(1, '게임 목표'),
        _empty_block('to_do'),
        _heading(1, '복기'),
        _heading(2, '잘한 점(엔진 분석 없이)'),
        _empty_block('bulleted_list_item'),
        _heading(2, '아쉬운 점(엔진 분석 없이)'),
        _empty_block('bulleted_list_item'),
        _heading(2, '개선할 점(엔진 분석 및 리뷰 반영)'),
        _empty_block('bulleted_list_item'),
    ]
