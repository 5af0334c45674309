"""
Presentation Sequencer - Drives one scene transition at a time.

Each call to show_scene() is a transition request with its own
PresentationState:

    IDLE -> RESOLVING -> NOT_FOUND                 (terminal)
                      -> PRESENTING -> REVEALED

PRESENTING runs these steps in order:
    1. Hide the content panel
    2. Background: preload the image, paint the hidden layer, swap,
       clear the old layer once the crossfade has settled
    3. Compute effect and music volumes (ducking)
    4. Music: switch, resume or leave playing; apply the music volume
    5. Text and choice controls
    6. Effect: play it and reveal the panel when it ends, or reveal
       after a short delay when there is no effect

Waiting never blocks. Image loads, effect completion and timers come
back as scheduler callbacks. Every callback is tagged with the
generation of the request that issued it; when a newer request has
started since, the callback is dropped. Nothing is cancelled.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from visual_novel.config import Config
from visual_novel.errors import PlaybackError, SceneNotFoundError
from visual_novel.monitoring.logging import StructuredLogger, get_logger
from visual_novel.runtime.ducking import DuckResult, duck
from visual_novel.runtime.scheduler import Scheduler, TimerHandle
from visual_novel.stage.assets import AssetResolver
from visual_novel.stage.audio import AudioChannel, SoundfileChannel
from visual_novel.stage.images import FileImageLoader, ImageLoader
from visual_novel.stage.layers import Layer, Stage
from visual_novel.stage.panel import ChoiceControl, ContentPanel
from visual_novel.story.graph import SceneGraph
from visual_novel.story.records import SceneRecord

logger = logging.getLogger(__name__)


class SequencerState(Enum):
    """Lifecycle of one transition request."""
    IDLE = "idle"
    RESOLVING = "resolving"
    NOT_FOUND = "not_found"
    PRESENTING = "presenting"
    REVEALED = "revealed"


VALID_TRANSITIONS: dict[SequencerState, set[SequencerState]] = {
    SequencerState.IDLE: {SequencerState.RESOLVING},
    SequencerState.RESOLVING: {SequencerState.NOT_FOUND, SequencerState.PRESENTING},
    SequencerState.PRESENTING: {SequencerState.REVEALED},
    SequencerState.NOT_FOUND: set(),
    SequencerState.REVEALED: set(),
}


def is_valid_transition(from_state: SequencerState, to_state: SequencerState) -> bool:
    """Check if a state transition is valid."""
    return to_state in VALID_TRANSITIONS.get(from_state, set())


def not_found_message(scene_id: str) -> str:
    return f"Error: Scene '{scene_id}' not found."


@dataclass
class PresentationState:
    """
    State of one transition request.

    Replaced, never merged, when the next request starts.

    Attributes:
        generation: Request number; callbacks from older requests are dropped
        scene_id: Requested scene id
        state: Current lifecycle state
        trail: Every state entered, in order
        record: Resolved scene, None until resolved or when missing
        active_layer: Index of the front layer after this request's swap
        cleanup_timer: Pending clear of the outgoing layer
        reveal_timer: Pending delayed reveal (scenes without an effect)
        revealed: Whether the content panel has been revealed
        volumes: Ducking result applied for this scene
        error: Diagnostic shown in place of the scene text
    """
    generation: int
    scene_id: str
    state: SequencerState = SequencerState.IDLE
    trail: list[SequencerState] = field(default_factory=lambda: [SequencerState.IDLE])
    record: SceneRecord | None = None
    active_layer: int = 0
    cleanup_timer: TimerHandle | None = field(default=None, repr=False)
    reveal_timer: TimerHandle | None = field(default=None, repr=False)
    revealed: bool = False
    volumes: DuckResult | None = None
    error: str | None = None

    def enter(self, to_state: SequencerState) -> None:
        if not is_valid_transition(self.state, to_state):
            raise RuntimeError(
                f"Invalid transition {self.state.value} -> {to_state.value} "
                f"for scene {self.scene_id!r}"
            )
        self.state = to_state
        self.trail.append(to_state)

    @property
    def is_terminal(self) -> bool:
        return not VALID_TRANSITIONS[self.state]


class PresentationSequencer:
    """Scene transition engine.

    Handles (layers, audio channels, image loader, panel, scheduler) are
    injected and owned by the sequencer for its lifetime.

    Example:
        scheduler = ManualScheduler()
        sequencer = PresentationSequencer.headless(graph, scheduler)

        sequencer.start()
        scheduler.advance(500)
        sequencer.panel.text          # first scene's text
        sequencer.panel.select(0)     # follow the first choice
    """

    def __init__(
        self,
        graph: SceneGraph,
        *,
        scheduler: Scheduler,
        music: AudioChannel,
        effect: AudioChannel,
        images: ImageLoader,
        stage: Stage | None = None,
        panel: ContentPanel | None = None,
        config: Config | None = None,
        assets: AssetResolver | None = None,
        rng: random.Random | None = None,
        events: StructuredLogger | None = None,
    ):
        self.graph = graph
        self.scheduler = scheduler
        self.music = music
        self.effect = effect
        self.images = images
        self.stage = stage or Stage()
        self.panel = panel or ContentPanel()
        self.config = config or Config()
        self.assets = assets or AssetResolver.from_config(self.config)
        self._rng = rng or random.Random()
        self._events = events

        self._generation = 0
        self._current: PresentationState | None = None

    @classmethod
    def headless(
        cls,
        graph: SceneGraph,
        scheduler: Scheduler,
        config: Config | None = None,
        **kwargs: Any,
    ) -> "PresentationSequencer":
        """Build a sequencer with file-backed headless handles."""
        return cls(
            graph,
            scheduler=scheduler,
            music=SoundfileChannel(scheduler, name="music"),
            effect=SoundfileChannel(scheduler, name="sfx"),
            images=FileImageLoader(scheduler),
            config=config,
            **kwargs,
        )

    @property
    def events(self) -> StructuredLogger:
        return self._events or get_logger()

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def current(self) -> PresentationState | None:
        """State of the latest request."""
        return self._current

    def start(self) -> PresentationState:
        """Show the entry point (first scene in parse order)."""
        entry = self.graph.entry_point
        if entry is None:
            raise SceneNotFoundError("", details={"reason": "story has no scenes"})
        return self.show_scene(entry)

    def show_scene(self, scene_id: str) -> PresentationState:
        """Run one transition request.

        Args:
            scene_id: Scene to show.

        Returns:
            The new PresentationState. Its state is NOT_FOUND for a
            missing scene; otherwise PRESENTING (or already REVEALED).
        """
        self._generation += 1
        state = PresentationState(
            generation=self._generation,
            scene_id=scene_id,
            active_layer=self.stage.active_index,
        )
        self._current = state
        events = self.events.bind(generation=state.generation)

        state.enter(SequencerState.RESOLVING)
        try:
            record = self.graph.resolve(scene_id)
        except SceneNotFoundError:
            self._show_not_found(state)
            events.scene_not_found(scene_id)
            return state

        state.record = record
        state.enter(SequencerState.PRESENTING)

        # 1. Hide content
        self.panel.hide()
        state.revealed = False

        # 2. Background transition
        self._transition_background(state, record)

        # 3. Volumes
        volumes = duck(record.effect_volume_percent, self.config.base_music_volume)
        state.volumes = volumes

        # 4. Music
        self._update_music(record, volumes, events)

        # 5. Text and choices
        self._render_content(record)

        # 6. Effect and reveal gating
        self._play_effect(state, record, volumes, events)

        events.scene_shown(
            scene_id,
            choices=len(record.choices),
            image=record.image,
            audio=record.audio,
            sfx=record.sfx,
        )
        return state

    # Callback tagging

    def _guard(self, state: PresentationState, fn: Callable[..., None]) -> Callable[..., None]:
        """Wrap a deferred callback so it only runs for the latest request."""
        def run(*args: Any) -> None:
            if state.generation != self._generation:
                logger.debug(
                    "stale_callback: %s for generation %d (current %d)",
                    getattr(fn, "__name__", "callback"), state.generation, self._generation,
                )
                return
            fn(*args)
        return run

    # Steps

    def _show_not_found(self, state: PresentationState) -> None:
        state.enter(SequencerState.NOT_FOUND)
        state.error = not_found_message(state.scene_id)
        self.panel.text = state.error
        self.panel.clear_choices()
        self.panel.hide()
        self.panel.reveal()
        state.revealed = True

    def _transition_background(self, state: PresentationState, record: SceneRecord) -> None:
        if record.image is None:
            self.stage.hidden.assign_fill(self.config.fallback_fill)
            self._swap_layers(state)
            return

        path = self.assets.image_path(record.image)

        def on_load(loaded_path: str) -> None:
            layer = self.stage.hidden
            layer.assign_image(loaded_path)
            if self.config.randomize_focus:
                layer.focus = (self._rng.uniform(0, 100), self._rng.uniform(0, 100))
            layer.restart_animation()
            self._swap_layers(state)

        def on_error(failed_path: str, reason: str) -> None:
            logger.warning("Image preload failed: %s (%s)", failed_path, reason)

        self.images.load(path, self._guard(state, on_load), self._guard(state, on_error))

    def _swap_layers(self, state: PresentationState) -> None:
        _, outgoing = self.stage.swap()
        state.active_layer = self.stage.active_index

        def settle(layer: Layer = outgoing) -> None:
            layer.clear()

        state.cleanup_timer = self.scheduler.call_later(
            self.config.settle_ms, self._guard(state, settle)
        )

    def _update_music(
        self,
        record: SceneRecord,
        volumes: DuckResult,
        events: StructuredLogger,
    ) -> None:
        self.music.volume = volumes.music_volume
        if record.audio is None:
            # Music carries over from the previous scene
            return

        source = self.assets.audio_path(record.audio)
        try:
            if self.music.source != source:
                self.music.load(source)
                self.music.play()
            elif self.music.paused:
                self.music.play()
        except PlaybackError as e:
            events.playback_error(source, e, channel="music")

    def _render_content(self, record: SceneRecord) -> None:
        self.panel.text = record.text
        self.panel.clear_choices()
        for choice in record.choices:
            self.panel.add_choice(ChoiceControl.bind(choice, self.show_scene))

    def _play_effect(
        self,
        state: PresentationState,
        record: SceneRecord,
        volumes: DuckResult,
        events: StructuredLogger,
    ) -> None:
        self.effect.on_ended(None)
        self.effect.pause()
        self.effect.rewind()

        if record.sfx is None:
            state.reveal_timer = self.scheduler.call_later(
                self.config.reveal_delay_ms,
                self._guard(state, lambda: self._reveal(state)),
            )
            return

        source = self.assets.audio_path(record.sfx)
        self.effect.load(source)
        self.effect.volume = volumes.effect_volume
        self.effect.on_ended(self._guard(state, lambda: self._reveal(state)))
        events.volumes(volumes.effect_volume, volumes.music_volume)

        try:
            self.effect.play()
        except PlaybackError as e:
            events.playback_error(source, e, channel="sfx")
            self._reveal(state)

    def _reveal(self, state: PresentationState) -> None:
        if state.state is not SequencerState.PRESENTING:
            return
        state.enter(SequencerState.REVEALED)
        state.revealed = True
        self.panel.reveal()


__all__ = [
    "SequencerState",
    "VALID_TRANSITIONS",
    "is_valid_transition",
    "not_found_message",
    "PresentationState",
    "PresentationSequencer",
]
