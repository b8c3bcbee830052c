"""Game session engine with state machine."""

from typing import Callable

from transitions import EventData, Machine

from core.cards import Card
from core.errors import Busy, CardTableError, IllegalTransition, StepCancelled
from core.game.events import EventEmitter, EventType, GameEvent
from core.game.state import SessionState, sources_of
from core.gate import AnimationGate, GateToken
from core.hand import CardHolder, Hand, Owner
from core.logging_utils import get_logger
from core.supply import CardSupply

logger = get_logger(__name__)

# Below this many undealt cards a restart starts a fresh supply
MINIMUM_THRESHOLD = 15

# Gate channel for everything that animates the deck
DECK_CHANNEL = "deck"

HandFactory = Callable[[Owner], CardHolder]


class GameSession:
    """
    Player-versus-house session driven by a state machine.

    This is the core session logic, completely UI-agnostic.
    Communication happens through events and return values only.

    Every action draws first and commits afterwards: a supply failure
    propagates to the caller with state and hands untouched. Actions that
    are not allowed right now (wrong state, gate held, supply busy) are
    absorbed; they return False, set ``last_rejection`` and emit
    ``action-rejected``.
    """

    # State machine states
    STATES = [s.name.lower() for s in SessionState]

    # State machine transitions
    TRANSITIONS = [
        {
            "trigger": "begin_deal",
            "source": [s.name.lower() for s in sources_of(SessionState.DEALING)],
            "dest": "dealing",
        },
        {"trigger": "finish_deal", "source": "dealing", "dest": "player_turn"},
        {"trigger": "player_hit", "source": "player_turn", "dest": "player_turn"},
        {"trigger": "begin_house_turn", "source": "player_turn", "dest": "house_turn"},
        {"trigger": "resolve", "source": "house_turn", "dest": "resolved"},
    ]

    def __init__(
        self,
        supply: CardSupply,
        gate: AnimationGate | None = None,
        minimum_threshold: int = MINIMUM_THRESHOLD,
        deal_animation: float = 0.0,
        shuffle_animation: float = 0.0,
        channel: str = DECK_CHANNEL,
        hand_factory: HandFactory = Hand,
    ) -> None:
        """
        Initialize a new idle session.

        Args:
            supply: Card supply owned by this session
            gate: Animation gate (a private one is created if not given)
            minimum_threshold: Restart starts a fresh supply below this many cards
            deal_animation: Seconds the deck channel stays held after a deal
            shuffle_animation: Seconds the deck channel stays held after a shuffle
            channel: Gate channel guarding deck effects
            hand_factory: Builds the two hands; must produce CardHolder objects
        """
        if minimum_threshold < 0:
            raise ValueError("Minimum threshold cannot be negative")

        self.supply = supply
        self.gate = gate or AnimationGate()
        self.minimum_threshold = minimum_threshold
        self.deal_animation = deal_animation
        self.shuffle_animation = shuffle_animation
        self.channel = channel

        self.player_hand = self._build_hand(hand_factory, Owner.PLAYER)
        self.house_hand = self._build_hand(hand_factory, Owner.HOUSE)
        self.events = EventEmitter()
        self.last_rejection: CardTableError | None = None

        self.supply.add_listener(self._on_supply_replenished)

        # Initialize state machine
        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="idle",
            auto_transitions=False,
            model_attribute="_machine_state",
            after_state_change="_on_state_changed",
            send_event=True,
        )

    @staticmethod
    def _build_hand(factory: HandFactory, owner: Owner) -> CardHolder:
        hand = factory(owner)
        if not isinstance(hand, CardHolder):
            raise TypeError(
                f"{type(hand).__name__} does not provide the CardHolder interface"
            )
        return hand

    @property
    def state(self) -> SessionState:
        """Get current session state as enum."""
        return SessionState[self._machine_state.upper()]  # type: ignore

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to session events."""
        self.events.subscribe(handler, event_type)

    def unsubscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Unsubscribe from session events."""
        self.events.unsubscribe(handler, event_type)

    async def restart(self, cancel_pending: bool = False) -> bool:
        """
        Clear both hands and deal a new round.

        Deals two face-up cards to the player, then two to the house with
        the second face down. Starts a fresh supply first when fewer than
        ``minimum_threshold`` cards remain.

        Args:
            cancel_pending: Invalidate whatever holds the deck channel first

        Returns:
            True if the deal was committed
        """
        if cancel_pending:
            self.cancel_pending()

        token = self._acquire("restart")
        if token is None:
            return False

        committed = False
        try:
            if self.supply.remaining < self.minimum_threshold:
                await self.supply.initialize()
            player_cards = await self.supply.draw(2)
            house_cards = await self.supply.draw(2)
            if self._still_valid(token, "restart"):
                self._commit_deal(player_cards, house_cards)
                committed = True
        except Busy as exc:
            self._reject("restart", exc)
        finally:
            self.gate.release(token)

        if committed:
            self._hold(self.deal_animation)
        return committed

    def _commit_deal(self, player_cards: list[Card], house_cards: list[Card]) -> None:
        """Apply a fully drawn deal; no suspension points inside."""
        self.begin_deal()

        for hand in (self.player_hand, self.house_hand):
            hand.clear()
            self.events.emit_new(EventType.HAND_CLEARED, owner=hand.owner)

        for card in player_cards:
            self._add_card(self.player_hand, card, face_up=True)
        for index, card in enumerate(house_cards):
            self._add_card(self.house_hand, card, face_up=index == 0)

        self.finish_deal()

    async def hit(self) -> bool:
        """Player takes one more face-up card."""
        if self.state != SessionState.PLAYER_TURN:
            self._reject("hit", IllegalTransition("hit", self.state))
            return False

        token = self._acquire("hit")
        if token is None:
            return False

        try:
            cards = await self.supply.draw(1)
            if not self._still_valid(token, "hit"):
                return False
            self._add_card(self.player_hand, cards[0], face_up=True)
            self.player_hit()
            return True
        except Busy as exc:
            self._reject("hit", exc)
            return False
        finally:
            self.gate.release(token)

    async def stand(self) -> bool:
        """
        Player stands; the house reveals its hole card and draws once.

        Passes through HOUSE_TURN and ends in RESOLVED.
        """
        if self.state != SessionState.PLAYER_TURN:
            self._reject("stand", IllegalTransition("stand", self.state))
            return False

        token = self._acquire("stand")
        if token is None:
            return False

        try:
            cards = await self.supply.draw(1)
            if not self._still_valid(token, "stand"):
                return False
            self.begin_house_turn()
            self._reveal_card(self.house_hand, 1)
            self._add_card(self.house_hand, cards[0], face_up=True)
            self.resolve()
            return True
        except Busy as exc:
            self._reject("stand", exc)
            return False
        finally:
            self.gate.release(token)

    async def shuffle(self) -> bool:
        """Reshuffle the undealt cards of the current supply in place."""
        token = self._acquire("shuffle")
        if token is None:
            return False

        try:
            info = await self.supply.reshuffle()
        except Busy as exc:
            self._reject("shuffle", exc)
            return False
        finally:
            self.gate.release(token)

        self.events.emit_new(EventType.SUPPLY_SHUFFLED, remaining=info.remaining)
        self._hold(self.shuffle_animation)
        return True

    def cancel_pending(self) -> bool:
        """
        Invalidate the step or animation holding the deck channel.

        A cancelled in-flight action does not commit when its draw returns.

        Returns:
            True if something was cancelled
        """
        return self.gate.cancel(self.channel) is not None

    def close(self) -> None:
        """Detach from the supply and drop any pending hold."""
        self.supply.remove_listener(self._on_supply_replenished)
        self.gate.cancel(self.channel)

    def _acquire(self, action: str) -> GateToken | None:
        try:
            return self.gate.acquire(self.channel)
        except Busy as exc:
            self._reject(action, exc)
            return None

    def _still_valid(self, token: GateToken, action: str) -> bool:
        if token.cancelled:
            self._reject(action, StepCancelled(f"{action} was cancelled"))
            return False
        return True

    def _hold(self, duration: float) -> None:
        """Keep the deck channel held while an effect plays out."""
        if duration > 0:
            self.gate.acquire_for(self.channel, duration)

    def _add_card(self, hand: CardHolder, card: Card, face_up: bool) -> Card:
        held = hand.add_card(card, face_up)
        self.events.emit_new(
            EventType.CARD_DRAWN,
            card=held,
            owner=hand.owner,
            index=len(hand) - 1,
        )
        return held

    def _reveal_card(self, hand: CardHolder, index: int) -> None:
        if hand.reveal_card(index):
            self.events.emit_new(
                EventType.CARD_REVEALED,
                card=hand[index],
                owner=hand.owner,
                index=index,
            )

    def _reject(self, action: str, error: CardTableError) -> None:
        self.last_rejection = error
        logger.info("Rejected %s in %s: %s", action, self.state, error)
        self.events.emit_new(
            EventType.ACTION_REJECTED,
            action=action,
            reason=type(error).__name__,
            message=str(error),
            state=self.state,
        )

    def _on_state_changed(self, event: EventData) -> None:
        source = SessionState[event.transition.source.upper()]
        dest = SessionState[event.transition.dest.upper()]
        if source == dest:
            return
        self.events.emit(
            GameEvent(EventType.STATE_CHANGED, {"from": source, "to": dest})
        )

    def _on_supply_replenished(self, remaining: int) -> None:
        self.events.emit_new(EventType.SUPPLY_REPLENISHED, remaining=remaining)

    @property
    def is_busy(self) -> bool:
        """Check if an action or effect currently holds the deck."""
        return self.gate.is_held(self.channel) or self.supply.is_busy

    @property
    def can_hit(self) -> bool:
        """Check if hitting is allowed."""
        return self.state == SessionState.PLAYER_TURN and not self.is_busy

    @property
    def can_stand(self) -> bool:
        """Check if standing is allowed."""
        return self.state == SessionState.PLAYER_TURN and not self.is_busy

    @property
    def remaining(self) -> int:
        """Return the number of undealt cards in the supply."""
        return self.supply.remaining
