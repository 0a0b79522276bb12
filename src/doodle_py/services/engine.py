"""Round state machine.

The engine drives a room through
``waiting -> choosing_word -> playing -> ended_round -> (choosing_word | ended)``.
All methods are synchronous and expect the caller to hold the room lock;
timer callbacks re-enter through :class:`~doodle_py.game.timers.RoomTimers`,
which takes the lock before calling back.

Every phase change goes through :meth:`RoundEngine._transition`, which
cancels the timers of the previous phase and bumps ``RoundState.phase`` in
the same step. Timer callbacks carry the phase they were armed for and do
nothing when it no longer matches.
"""

from __future__ import annotations

import random
from functools import partial
from typing import TYPE_CHECKING, assert_never

import structlog

from doodle_py.core.config import EngineTimings
from doodle_py.exceptions import GameStateError, NotAuthorizedError, PlayerNotFoundError
from doodle_py.game import hints, scoring
from doodle_py.game.drawing import Clear, Fill, Stroke, Undo
from doodle_py.game.events import (
    CanvasCleared,
    ChatMessage,
    DrawingHistory,
    DrawingUpdate,
    Envelope,
    FinalScores,
    RoomState,
    RoundEnded,
    SecretWord,
    SystemMessage,
    TimerUpdate,
    WordChoices,
    WordHint,
)
from doodle_py.game.exceptions import InsufficientWordsError
from doodle_py.game.timers import TimerSlot
from doodle_py.game.types import RoundEndReason, RoundStatus

if TYPE_CHECKING:
    from doodle_py.game.drawing import DrawingAction
    from doodle_py.game.events import Notifier, OutboundEvent
    from doodle_py.game.models import Player, Room
    from doodle_py.game.wordbank import WordBank

logger = structlog.get_logger(__name__)

MIN_PLAYERS = 2


class RoundEngine:
    """Drives rounds, turns, scoring and drawing replication for rooms."""

    def __init__(
        self,
        notifier: Notifier,
        word_bank: WordBank,
        timings: EngineTimings | None = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            notifier: Receives every outbound envelope.
            word_bank: Source of word choices.
            timings: Timer delays. Defaults to the standard 5s/1s/5s/15s set.
            rng: Random source for timeout picks and hint letters.
        """
        self._notifier = notifier
        self._word_bank = word_bank
        self.timings = timings or EngineTimings()
        self._rng = rng or random.Random()

    # Delivery helpers

    def broadcast(self, room: Room, event: OutboundEvent, *, exclude: str | None = None) -> None:
        """Send an event to every connected player of the room."""
        self._notifier.publish(Envelope(room.code, event, exclude=exclude))

    def send(self, room: Room, session_id: str, event: OutboundEvent) -> None:
        """Send an event to a single session."""
        self._notifier.publish(Envelope(room.code, event, recipient=session_id))

    def notice(self, room: Room, content: str, *, correct_guess: bool = False) -> None:
        """Broadcast a system message."""
        self.broadcast(room, SystemMessage(content=content, correct_guess=correct_guess))

    def broadcast_state(self, room: Room) -> None:
        """Broadcast a fresh room snapshot."""
        self.broadcast(room, RoomState(room=room.snapshot()))

    def catch_up(self, room: Room, player: Player) -> None:
        """Bring a joining or reconnecting player up to date privately."""
        state = room.state
        session_id = player.session_id
        self.send(room, session_id, DrawingHistory(entries=tuple(room.drawing.to_list())))
        if state.status == RoundStatus.CHOOSING_WORD and session_id == state.drawer_id:
            self.send(
                room,
                session_id,
                WordChoices(choices=tuple(state.choices), timeout=self.timings.word_choice_timeout),
            )
        elif state.status == RoundStatus.PLAYING:
            if session_id == state.drawer_id:
                self.send(room, session_id, SecretWord(word=state.word))
            else:
                self.send(room, session_id, WordHint(hint=state.masked_word()))

    # Phase bookkeeping

    def _transition(self, room: Room, status: RoundStatus) -> int:
        room.timers.cancel_phase()
        room.state.status = status
        room.state.phase += 1
        return room.state.phase

    @staticmethod
    def _is_current(room: Room, phase: int, status: RoundStatus) -> bool:
        return not room.closed and room.state.phase == phase and room.state.status == status

    @staticmethod
    def _require_player(room: Room, session_id: str) -> Player:
        player = room.roster.by_session(session_id)
        if player is None:
            raise PlayerNotFoundError(room.code, session_id)
        return player

    def _standings(self, room: Room) -> list[dict[str, object]]:
        return [
            {"rank": rank, **player.to_dict()} for rank, player in enumerate(room.roster.standings(), start=1)
        ]

    # Game lifecycle

    def start_game(self, room: Room, session_id: str) -> bool:
        """Start a game on behalf of the host.

        Returns:
            True if the game started, False if there are too few connected players.

        Raises:
            PlayerNotFoundError: If the session is not in the room.
            NotAuthorizedError: If the caller is not the host.
            GameStateError: If a game is already running.
        """
        player = self._require_player(room, session_id)
        if not player.is_host:
            raise NotAuthorizedError("start_game", "Only the host can start the game.")
        if room.state.status not in (RoundStatus.WAITING, RoundStatus.ENDED):
            raise GameStateError("A game is already in progress.")
        return self._begin_game(room)

    def reset_game(self, room: Room, session_id: str) -> bool:
        """Restart the game from scratch on behalf of the host, from any phase.

        Raises:
            PlayerNotFoundError: If the session is not in the room.
            NotAuthorizedError: If the caller is not the host.
        """
        player = self._require_player(room, session_id)
        if not player.is_host:
            raise NotAuthorizedError("reset_game", "Only the host can reset the game.")
        logger.info("Resetting game", room_code=room.code)
        return self._begin_game(room)

    def _begin_game(self, room: Room) -> bool:
        if room.roster.connected_count() < MIN_PLAYERS:
            self.notice(room, f"You need at least {MIN_PLAYERS} active players to start.")
            return False
        room.roster.reset_scores()
        room.final_scores = []
        self._transition(room, RoundStatus.WAITING)
        room.state.reset()
        room.drawing.clear()
        logger.info("Game started", room_code=room.code, players=room.roster.connected_count())
        self.broadcast_state(room)
        self.start_round(room)
        return True

    def start_round(self, room: Room) -> None:
        """Advance to the next turn, or end the game when the rounds are used up."""
        state = room.state
        roster = room.roster
        if room.closed or state.status == RoundStatus.ENDED:
            return
        if roster.connected_count() < MIN_PLAYERS and state.status != RoundStatus.WAITING:
            self.end_game(room, "Not enough players to continue.")
            return

        state.turn += 1
        if state.turn >= len(roster):
            state.turn = 0
            state.current_round += 1
        if state.current_round > room.settings.rounds:
            self.end_game(room)
            return

        index = roster.next_connected_from(state.turn)
        if index is None:
            self.end_game(room, "Could not find a drawer.")
            return
        state.turn = index
        drawer = roster[index]

        try:
            choices = self._word_bank.word_choices(room.settings)
        except InsufficientWordsError:
            logger.exception("Word bank cannot supply choices", room_code=room.code)
            self.end_game(room, "Not enough words to continue.")
            return

        phase = self._transition(room, RoundStatus.CHOOSING_WORD)
        state.clear_turn()
        state.drawer_id = drawer.session_id
        state.choices = choices
        room.drawing.clear()

        self.broadcast(room, CanvasCleared())
        self.send(
            room,
            drawer.session_id,
            WordChoices(choices=tuple(choices), timeout=self.timings.word_choice_timeout),
        )
        self.broadcast_state(room)
        self.notice(room, f"{drawer.nickname} is choosing a word...")
        room.timers.arm(
            TimerSlot.WORD_CHOICE,
            self.timings.word_choice_timeout,
            partial(self._on_choice_timeout, room, phase),
        )
        logger.info(
            "Round started",
            room_code=room.code,
            round=state.current_round,
            turn=state.turn,
            drawer=drawer.nickname,
        )

    # Word choice

    def choose_word(self, room: Room, session_id: str, word: str) -> None:
        """Accept the drawer's word choice.

        Raises:
            GameStateError: If no choice is pending or the word was not offered.
            NotAuthorizedError: If the caller is not the drawer.
        """
        state = room.state
        if state.status != RoundStatus.CHOOSING_WORD:
            raise GameStateError("No word is being chosen right now.")
        if session_id != state.drawer_id:
            raise NotAuthorizedError("choose_word", "Only the drawer can choose the word.")
        wanted = word.strip().lower()
        choice = next((c for c in state.choices if c.lower() == wanted), None)
        if choice is None:
            raise GameStateError(f"'{word}' is not one of the offered words.")
        self._begin_drawing(room, choice)

    def _on_choice_timeout(self, room: Room, phase: int) -> None:
        if not self._is_current(room, phase, RoundStatus.CHOOSING_WORD):
            logger.debug("Ignoring stale word choice timeout", room_code=room.code)
            return
        word = self._rng.choice(room.state.choices)
        logger.info("Word choice timed out, picked at random", room_code=room.code)
        self._begin_drawing(room, word)

    def _begin_drawing(self, room: Room, word: str) -> None:
        state = room.state
        phase = self._transition(room, RoundStatus.PLAYING)
        state.word = word
        state.choices = []
        state.timer = room.settings.draw_time
        state.revealed = set()
        state.hints_elapsed = 0

        drawer = room.roster.by_session(state.drawer_id)
        if state.drawer_id is not None:
            self.send(room, state.drawer_id, SecretWord(word=word))
        self.broadcast(room, WordHint(hint=state.masked_word()), exclude=state.drawer_id)
        self.broadcast_state(room)
        if drawer is not None:
            self.notice(room, f"{drawer.nickname} is drawing!")
        room.timers.arm(
            TimerSlot.TICK,
            self.timings.tick_interval,
            partial(self._on_tick, room, phase),
            repeat=True,
        )

    # Drawing phase

    def _on_tick(self, room: Room, phase: int) -> None:
        if not self._is_current(room, phase, RoundStatus.PLAYING):
            logger.debug("Ignoring stale tick", room_code=room.code)
            return
        state = room.state
        state.timer = max(0, state.timer - 1)
        self.broadcast(room, TimerUpdate(timer=state.timer))
        if state.timer <= 0:
            self.end_round(room, RoundEndReason.TIME_UP)
            return
        self._update_hints(room)

    def _update_hints(self, room: Room) -> None:
        settings = room.settings
        state = room.state
        steps = hints.hints_elapsed(settings.draw_time - state.timer, settings.draw_time, settings.hints)
        if steps <= state.hints_elapsed:
            return
        state.hints_elapsed = steps
        target = hints.letters_to_reveal(state.word, steps)
        if hints.reveal(state.word, state.revealed, target, rng=self._rng):
            self.broadcast(room, WordHint(hint=state.masked_word()), exclude=state.drawer_id)
            logger.debug("Hint revealed", room_code=room.code, step=steps, revealed=len(state.revealed))

    def submit_guess(self, room: Room, session_id: str, text: str) -> bool:
        """Handle a chat line that may be a guess.

        The drawer and players that already guessed are ignored. Everything
        else is broadcast as chat; outside the drawing phase it is never scored.

        Returns:
            True if the text was a correct guess.

        Raises:
            PlayerNotFoundError: If the session is not in the room.
        """
        state = room.state
        player = self._require_player(room, session_id)
        if session_id == state.drawer_id or session_id in state.guessed_ids:
            return False

        self.broadcast(room, ChatMessage(player_id=session_id, nickname=player.nickname, text=text))
        if state.status != RoundStatus.PLAYING or text.strip().lower() != state.word.lower():
            return False

        first = not state.solved_keys
        player.award_points(scoring.guesser_points(state.timer, room.settings.draw_time, first=first))
        state.guessed_ids.append(session_id)
        state.solved_keys.add(player.key)

        drawer = room.roster.by_session(state.drawer_id)
        guessers = room.roster.guessers(state.drawer_id)
        if drawer is not None:
            drawer.award_points(scoring.drawer_share(len(guessers)))

        self.notice(room, f"{player.nickname} guessed the word!", correct_guess=True)
        logger.info("Correct guess", room_code=room.code, player=player.nickname, first=first)

        if len(state.guessed_ids) >= len(guessers):
            if drawer is not None:
                drawer.award_points(scoring.ALL_GUESSED_DRAWER_BONUS)
            # Correct guessers who have since disconnected still get the bonus.
            for guesser in room.roster:
                if guesser.key in state.solved_keys:
                    guesser.award_points(scoring.ALL_GUESSED_GUESSER_BONUS)
            self.end_round(room, RoundEndReason.ALL_GUESSED)
        else:
            self.broadcast_state(room)
        return True

    def apply_drawing(self, room: Room, session_id: str, action: DrawingAction) -> bool:
        """Apply a drawing action from the current drawer.

        Actions from anyone else are dropped.

        Returns:
            True if the action was applied.
        """
        state = room.state
        if state.drawer_id is None or session_id != state.drawer_id:
            logger.debug("Dropping drawing action from non-drawer", room_code=room.code)
            return False

        match action:
            case Clear():
                room.drawing.clear()
                self.broadcast(room, CanvasCleared())
            case Undo():
                room.drawing.undo()
                self.broadcast(room, DrawingHistory(entries=tuple(room.drawing.to_list())))
            case Stroke() | Fill():
                entry = room.drawing.append(action)
                self.broadcast(room, DrawingUpdate(action=entry.to_dict()), exclude=session_id)
            case _:
                assert_never(action)
        return True

    # Round and game end

    def end_round(self, room: Room, reason: RoundEndReason) -> bool:
        """Finish the drawing phase. Does nothing unless the room is playing.

        Returns:
            True if the round ended.
        """
        if room.state.status != RoundStatus.PLAYING:
            return False
        self._finish_turn(room, reason)
        self.notice(room, f"Round over! The word was: {room.state.word}")
        return True

    def abort_word_choice(self, room: Room) -> bool:
        """End the turn while the drawer is still choosing (the drawer left).

        Returns:
            True if the turn was aborted.
        """
        if room.state.status != RoundStatus.CHOOSING_WORD:
            return False
        room.state.choices = []
        self._finish_turn(room, RoundEndReason.DRAWER_LEFT)
        return True

    def _finish_turn(self, room: Room, reason: RoundEndReason) -> None:
        state = room.state
        phase = self._transition(room, RoundStatus.ENDED_ROUND)
        self.broadcast(
            room,
            RoundEnded(word=state.word, reason=reason.value, scores=tuple(self._standings(room))),
        )
        self.broadcast_state(room)
        room.timers.arm(
            TimerSlot.ROUND_END,
            self.timings.round_end_delay,
            partial(self._on_round_end_elapsed, room, phase),
        )
        logger.info("Round ended", room_code=room.code, reason=reason.value, round=state.current_round)

    def _on_round_end_elapsed(self, room: Room, phase: int) -> None:
        if not self._is_current(room, phase, RoundStatus.ENDED_ROUND):
            logger.debug("Ignoring stale round end delay", room_code=room.code)
            return
        self.start_round(room)

    def end_game(self, room: Room, message: str = "Game over!") -> None:
        """Finish the game and publish final standings.

        Cancels the room's phase timers; disconnect grace timers keep running.
        """
        state = room.state
        self._transition(room, RoundStatus.ENDED)
        state.drawer_id = None
        state.choices = []
        state.current_round = min(state.current_round, room.settings.rounds)
        room.final_scores = self._standings(room)

        self.notice(room, message)
        self.broadcast(room, FinalScores(standings=tuple(room.final_scores)))
        self.broadcast_state(room)
        logger.info("Game ended", room_code=room.code, reason=message)
