import time
import uuid
from typing import Any, Dict, List

from minefield.models import GameError

SYSTEM_NAME = 'System'
SYSTEM_ID = 'system'


def _message(player_name: str, player_id: str, text: str) -> Dict[str, Any]:
    return {
        'id': uuid.uuid4().hex,
        'playerName': player_name,
        'playerId': player_id,
        'message': text,
        'timestamp': time.strftime('%H:%M:%S'),
    }


class ChatLog:
    """Bounded message history for one room, oldest first."""

    def __init__(self, limit: int = 100, max_length: int = 500):
        self.limit = limit
        self.max_length = max_length
        self._messages: List[Dict[str, Any]] = []

    def _append(self, message):
        self._messages.append(message)
        if len(self._messages) > self.limit:
            del self._messages[:-self.limit]
        return message

    def system(self, text: str) -> Dict[str, Any]:
        message = _message(SYSTEM_NAME, SYSTEM_ID, text)
        message['isSystem'] = True
        return self._append(message)

    def post(self, player, text) -> Dict[str, Any]:
        if not isinstance(text, str) or not text.strip():
            raise GameError('empty_message')
        if len(text) > self.max_length:
            raise GameError('message_too_long')
        return self._append(_message(player.name, player.session_id, text.strip()))

    def history(self) -> List[Dict[str, Any]]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)
