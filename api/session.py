"""Session management: signed session ids and live game sessions in memory."""

from datetime import datetime, timedelta
from random import Random
from uuid import uuid4

from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired

from config import config
from core.game import GameSession
from core.gate import AnimationGate
from core.logging_utils import get_logger
from core.supply import CardSupply, DeckClient, HttpDeckClient, InMemoryDeckClient

logger = get_logger(__name__)


class SessionSigner:
    """Sign and verify session IDs using itsdangerous."""

    def __init__(self, secret_key: str | None = None) -> None:
        """Initialize the signer with a secret key."""
        self._secret_key = secret_key or config.security.secret_key
        self._serializer = URLSafeTimedSerializer(self._secret_key)

    def sign(self, session_id: str) -> str:
        """Create a signed token from a session ID."""
        return self._serializer.dumps(session_id)

    def unsign(self, token: str, max_age: int | None = None) -> str | None:
        """
        Verify and extract session_id from a signed token.

        Args:
            token: The signed token to verify
            max_age: Maximum age in seconds (defaults to session_ttl)

        Returns:
            The session ID if valid, None otherwise
        """
        max_age = max_age or config.session_ttl
        try:
            return self._serializer.loads(token, max_age=max_age)
        except (BadSignature, SignatureExpired):
            return None

    def verify(self, token: str) -> str | None:
        """Check a token's signature without limiting its age."""
        try:
            return self._serializer.loads(token)
        except BadSignature:
            return None


# Global signer instance
_session_signer: SessionSigner | None = None


def get_session_signer() -> SessionSigner:
    """Get or create the session signer."""
    global _session_signer
    if _session_signer is None:
        _session_signer = SessionSigner()
    return _session_signer


class GameRegistry:
    """
    Live game sessions keyed by session token.

    Sessions hold open supplies and timers, so they stay in process memory
    and expire after ``session_ttl`` seconds of inactivity.
    """

    def __init__(self, ttl: int | None = None) -> None:
        self._ttl = ttl or config.session_ttl
        self._sessions: dict[str, tuple[GameSession, datetime]] = {}

    async def get(self, session_id: str) -> GameSession | None:
        """Get a session and refresh its expiry."""
        if session_id not in self._sessions:
            return None

        game, expiry = self._sessions[session_id]
        if expiry < datetime.now():
            await self.delete(session_id)
            return None

        self._sessions[session_id] = (game, self._expiry())
        return game

    async def set(self, session_id: str, game: GameSession) -> None:
        """Register a session, replacing any previous one under the same id."""
        previous = self._sessions.get(session_id)
        if previous is not None and previous[0] is not game:
            previous[0].close()
        self._sessions[session_id] = (game, self._expiry())

    async def delete(self, session_id: str) -> None:
        """Drop a session."""
        entry = self._sessions.pop(session_id, None)
        if entry is not None:
            entry[0].close()

    async def exists(self, session_id: str) -> bool:
        """Check if session exists."""
        return await self.get(session_id) is not None

    async def cleanup_expired(self) -> int:
        """Remove expired sessions."""
        now = datetime.now()
        expired = [
            sid for sid, (_, expiry) in self._sessions.items() if expiry < now
        ]
        for sid in expired:
            await self.delete(sid)
        if expired:
            logger.info("Expired %d game sessions", len(expired))
        return len(expired)

    def _expiry(self) -> datetime:
        return datetime.now() + timedelta(seconds=self._ttl)

    def __len__(self) -> int:
        return len(self._sessions)


# Global registry and deck client instances
_registry: GameRegistry | None = None
_deck_client: DeckClient | None = None


def get_registry() -> GameRegistry:
    """Get or create the game registry."""
    global _registry
    if _registry is None:
        _registry = GameRegistry()
    return _registry


def get_deck_client() -> DeckClient:
    """Get or create the deck service client selected by configuration."""
    global _deck_client
    if _deck_client is None:
        if config.supply.backend == "memory":
            _deck_client = InMemoryDeckClient(Random())
        else:
            _deck_client = HttpDeckClient(
                base_url=config.supply.base_url,
                timeout=config.supply.timeout,
            )
        logger.info("Using %s deck backend", config.supply.backend)
    return _deck_client


def set_deck_client(client: DeckClient | None) -> None:
    """Replace the shared deck client (None resets to configuration)."""
    global _deck_client
    _deck_client = client


async def close_deck_client() -> None:
    """Close the shared deck client, if any."""
    global _deck_client
    if _deck_client is not None:
        await _deck_client.aclose()
        _deck_client = None


def new_game_session() -> GameSession:
    """Build a game session with its own supply from configuration."""
    supply = CardSupply(
        get_deck_client(),
        deck_count=config.supply.deck_count,
        shuffled=config.supply.shuffled,
    )
    return GameSession(
        supply,
        gate=AnimationGate(),
        minimum_threshold=config.game.minimum_threshold,
        deal_animation=config.game.deal_animation,
        shuffle_animation=config.game.shuffle_animation,
        channel=config.game.channel,
    )


async def create_session(game: GameSession | None = None) -> str:
    """Create a new signed session holding a fresh (or given) game."""
    registry = get_registry()
    await registry.cleanup_expired()
    session_id = get_session_signer().sign(str(uuid4()))
    await registry.set(session_id, game or new_game_session())
    return session_id


async def get_session(session_id: str) -> GameSession | None:
    """
    Get the game for a session token, rejecting forged tokens.

    Only the signature is checked here; expiry is the registry's sliding
    TTL, so a session in use stays alive past its signing time.
    """
    if get_session_signer().verify(session_id) is None:
        await get_registry().delete(session_id)
        return None
    return await get_registry().get(session_id)


async def delete_session(session_id: str) -> None:
    """Delete a session."""
    await get_registry().delete(session_id)


def extract_session_id(token: str) -> str | None:
    """
    Extract the raw session ID from a signed token.

    Args:
        token: The signed session token

    Returns:
        The raw session ID if valid, None otherwise
    """
    signer = get_session_signer()
    return signer.unsign(token)
