# engine_py/src/valuecards_engine/errors.py

class GameError(Exception):
    """Base exception for game-related errors."""
    code = "GAME_ERROR"

    def __init__(self, message: str, code: str = None):
        self.code = code or self.code
        self.message = message
        super().__init__(f"[{self.code}] {message}")


class StateError(GameError):
    """Action is not allowed in the current room state."""


class SetupError(GameError):
    """Game could not be set up."""


class DataError(GameError):
    """Input or stored data is malformed."""


# Specific error codes
NOT_YOUR_TURN = "NOT_YOUR_TURN"
WRONG_PHASE = "WRONG_PHASE"
CARD_NOT_IN_HAND = "CARD_NOT_IN_HAND"
EMPTY_DECK = "EMPTY_DECK"
EMPTY_DISCARD_PILE = "EMPTY_DISCARD_PILE"
INVALID_INDEX = "INVALID_INDEX"
NOT_HOST = "NOT_HOST"
GAME_NOT_PLAYING = "GAME_NOT_PLAYING"
GAME_ALREADY_STARTED = "GAME_ALREADY_STARTED"
GAME_NOT_FINISHED = "GAME_NOT_FINISHED"
ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
ROOM_ALREADY_EXISTS = "ROOM_ALREADY_EXISTS"
ROOM_FULL = "ROOM_FULL"
PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
TRANSACTION_CONFLICT = "TRANSACTION_CONFLICT"
NO_PLAYERS = "NO_PLAYERS"
INSUFFICIENT_CARDS = "INSUFFICIENT_CARDS"
INVALID_TURN_INDEX = "INVALID_TURN_INDEX"
INVALID_CARD_ID = "INVALID_CARD_ID"
INVALID_SNAPSHOT = "INVALID_SNAPSHOT"


class NotYourTurn(StateError):
    code = NOT_YOUR_TURN


class WrongPhase(StateError):
    code = WRONG_PHASE


class CardNotInHand(StateError):
    code = CARD_NOT_IN_HAND


class EmptyDeck(StateError):
    code = EMPTY_DECK


class EmptyDiscardPile(StateError):
    code = EMPTY_DISCARD_PILE


class InvalidIndex(StateError):
    code = INVALID_INDEX


class NotHost(StateError):
    code = NOT_HOST


class GameNotPlaying(StateError):
    code = GAME_NOT_PLAYING


class GameAlreadyStarted(StateError):
    code = GAME_ALREADY_STARTED


class GameNotFinished(StateError):
    code = GAME_NOT_FINISHED


class RoomNotFound(StateError):
    code = ROOM_NOT_FOUND


class RoomAlreadyExists(StateError):
    code = ROOM_ALREADY_EXISTS


class RoomFull(StateError):
    code = ROOM_FULL


class PlayerNotFound(StateError):
    code = PLAYER_NOT_FOUND


class TransactionConflict(StateError):
    code = TRANSACTION_CONFLICT


class NoPlayers(SetupError):
    code = NO_PLAYERS


class InsufficientCards(SetupError):
    code = INSUFFICIENT_CARDS


class InvalidTurnIndex(DataError):
    code = INVALID_TURN_INDEX


class InvalidCardId(DataError):
    code = INVALID_CARD_ID


class InvalidSnapshot(DataError):
    code = INVALID_SNAPSHOT
