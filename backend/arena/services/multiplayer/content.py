"""Round content for multiplayer rooms.

Content is generated once when a room starts and stored on the room, so
both players always read the same list.
"""

import random
from typing import Any, Dict, List, Optional

from arena.constants import GameType
from .errors import InvalidPayloadError
from .room import RoomSettings

RIDDLES = [
    {'question': 'What has keys but cannot open locks?',
     'options': ['A piano', 'A map', 'A door', 'A safe'], 'answer': 0},
    {'question': 'What gets wetter the more it dries?',
     'options': ['A sponge', 'A towel', 'Rain', 'Soap'], 'answer': 1},
    {'question': 'What has hands but cannot clap?',
     'options': ['A statue', 'A glove', 'A clock', 'A robot'], 'answer': 2},
    {'question': 'What can travel around the world while staying in a corner?',
     'options': ['A stamp', 'A plane', 'A letter', 'A satellite'], 'answer': 0},
    {'question': 'What has a neck but no head?',
     'options': ['A shirt', 'A guitar', 'A bottle', 'A giraffe'], 'answer': 2},
    {'question': 'The more of this there is, the less you see. What is it?',
     'options': ['Fog', 'Darkness', 'Smoke', 'Snow'], 'answer': 1},
    {'question': 'What has one eye but cannot see?',
     'options': ['A needle', 'A storm', 'A potato', 'A camera'], 'answer': 0},
    {'question': 'What goes up but never comes down?',
     'options': ['A balloon', 'Smoke', 'Your age', 'A rocket'], 'answer': 2},
    {'question': 'What is full of holes but still holds water?',
     'options': ['A net', 'A sponge', 'A sieve', 'A bucket'], 'answer': 1},
    {'question': 'What belongs to you but others use it more than you do?',
     'options': ['Your name', 'Your phone', 'Your car', 'Your house'], 'answer': 0},
    {'question': 'What can you catch but not throw?',
     'options': ['A ball', 'A fish', 'A cold', 'A bus'], 'answer': 2},
    {'question': 'What has many teeth but cannot bite?',
     'options': ['A shark', 'A comb', 'A saw', 'A zipper'], 'answer': 1},
    {'question': 'What breaks when you say it?',
     'options': ['Glass', 'Silence', 'A promise', 'A record'], 'answer': 1},
    {'question': 'What runs but never walks?',
     'options': ['Water', 'A clock', 'A fox', 'A car'], 'answer': 0},
    {'question': 'What has words but never speaks?',
     'options': ['A parrot', 'A radio', 'A book', 'A sign language'], 'answer': 2},
]

MEMORY_ICONS = ['🍎', '🚀', '🎲', '🌵', '🐙', '⚽', '🎧', '🦊']


class ContentProvider:
    """Builds the ordered round items for a room's game type and settings."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def generate_round_content(self, game_type: str, settings: RoomSettings) -> List[Dict[str, Any]]:
        game_type = getattr(game_type, 'value', game_type)
        if game_type == GameType.SPEED_MATH_DUEL.value:
            return self._math_questions(settings.question_count)
        if game_type == GameType.RIDDLE_ARENA.value:
            return self._riddles(settings.question_count)
        if game_type == GameType.MEMORY_MATCH_BATTLE.value:
            return self._memory_cards()
        raise InvalidPayloadError(f'Unsupported game type: {game_type}')

    def _math_questions(self, count: int) -> List[Dict[str, Any]]:
        # Difficulty rises by thirds: small sums, then larger sums and
        # differences, then times tables.
        questions = []
        for idx in range(count):
            tier = (3 * idx) // max(count, 1)
            if tier == 0:
                a, b = self._rng.randint(1, 10), self._rng.randint(1, 10)
                op = '+'
            elif tier == 1:
                op = self._rng.choice(['+', '-'])
                a, b = self._rng.randint(10, 50), self._rng.randint(1, 30)
                if op == '-' and b > a:
                    a, b = b, a
            else:
                op = '×'
                a, b = self._rng.randint(2, 12), self._rng.randint(2, 12)
            if op == '+':
                answer = a + b
            elif op == '-':
                answer = a - b
            else:
                answer = a * b
            questions.append({'id': idx, 'a': a, 'op': op, 'b': b, 'answer': answer})
        return questions

    def _riddles(self, count: int) -> List[Dict[str, Any]]:
        picked: List[Dict[str, Any]] = []
        while len(picked) < count:
            batch = self._rng.sample(RIDDLES, min(len(RIDDLES), count - len(picked)))
            picked.extend(batch)
        return [
            {'id': idx, 'question': r['question'], 'options': list(r['options']), 'answer': r['answer']}
            for idx, r in enumerate(picked)
        ]

    def _memory_cards(self) -> List[Dict[str, Any]]:
        icons = MEMORY_ICONS * 2
        self._rng.shuffle(icons)
        return [{'id': idx, 'icon': icon} for idx, icon in enumerate(icons)]
