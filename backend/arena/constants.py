from enum import Enum


class GameType(str, Enum):
    SLIDING_PUZZLE = 'sliding_puzzle'
    DAILY_MYSTERY_WORD = 'daily_mystery_word'
    NUMBER_PYRAMID = 'number_pyramid'
    MEMORY_PATH = 'memory_path'
    LETTER_MAZE = 'letter_maze'
    PATTERN_SPOTTER = 'pattern_spotter'
    COLOR_MEMORY = 'color_memory'
    BALANCE_PUZZLE = 'balance_puzzle'
    SPEED_MATH_DUEL = 'speed_math_duel'
    RIDDLE_ARENA = 'riddle_arena'
    MEMORY_MATCH_BATTLE = 'memory_match_battle'
    WORD_CHAIN = 'word_chain'
    WORD_CONNECT = 'word_connect'


# Game types that can be played in a 2-player room
MULTIPLAYER_GAME_TYPES = frozenset({
    GameType.SPEED_MATH_DUEL,
    GameType.RIDDLE_ARENA,
    GameType.MEMORY_MATCH_BATTLE,
})

MAX_ROOM_PLAYERS = 2
INVITE_CODE_LENGTH = 6

__all__ = [
    "GameType",
    "MULTIPLAYER_GAME_TYPES",
    "MAX_ROOM_PLAYERS",
    "INVITE_CODE_LENGTH",
]
