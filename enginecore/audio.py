"""A pool of playback channels that sounds are played on, with volume and speed control."""

from __future__ import annotations

import abc
import os
import threading
from typing import Callable, List, Optional, Tuple, Union

from .wave import WaveData, WaveFormat, load_wave

__all__ = [
    "DEFAULT_FORMAT",
    "DEFAULT_CHANNEL_COUNT",
    "VOLUME_STEP",
    "SPEED_STEP",
    "MIN_PLAYBACK_SPEED",
    "Voice",
    "SilentVoice",
    "Channel",
    "Sound",
    "SoundSystem",
]

DEFAULT_FORMAT = WaveFormat(
    format_tag=1,
    channels=2,
    samples_per_sec=44100,
    avg_bytes_per_sec=176400,
    block_align=4,
    bits_per_sample=16,
    cb_size=20,
)
DEFAULT_CHANNEL_COUNT = 64
DEFAULT_VOLUME = 0.5
DEFAULT_PLAYBACK_SPEED = 1.0
VOLUME_STEP = 0.1
SPEED_STEP = 0.1
MIN_VOLUME = 0.0
MIN_PLAYBACK_SPEED = 0.1


class Voice(abc.ABC):
    """An output voice that plays one submitted buffer of samples.

    When a submitted buffer ends, or is flushed, the voice calls
    ``buffer_end_callback`` if one is set.
    """

    def __init__(self) -> None:
        self.buffer_end_callback: Optional[Callable[[], None]] = None

    def _notify_buffer_end(self) -> None:
        if self.buffer_end_callback is not None:
            self.buffer_end_callback()

    @abc.abstractmethod
    def submit(self, data: bytes, loop: bool) -> None:
        """Queue ``data`` for playing, repeating forever if ``loop``."""

    @abc.abstractmethod
    def start(self) -> None:
        """Start or resume consuming the queued buffer."""

    @abc.abstractmethod
    def stop(self) -> None:
        """Stop consuming the queued buffer, keeping it queued."""

    @abc.abstractmethod
    def flush(self) -> None:
        """Drop the queued buffer, which ends it."""

    @abc.abstractmethod
    def set_volume(self, volume: float) -> None:
        """Set the amplitude factor."""

    @abc.abstractmethod
    def set_frequency_ratio(self, ratio: float) -> None:
        """Set the playback frequency ratio."""

    @abc.abstractmethod
    def destroy(self) -> None:
        """Release the voice; it cannot be used afterwards."""


class SilentVoice(Voice):
    """A voice that produces no sound but keeps the state a real voice would have."""

    def __init__(self) -> None:
        super().__init__()
        self.playing = False
        self.volume = 1.0
        self.frequency_ratio = 1.0
        self.buffer: Optional[Tuple[bytes, bool]] = None
        self.destroyed = False

    def _check_alive(self) -> None:
        if self.destroyed:
            raise RuntimeError("the voice has been destroyed")

    def submit(self, data: bytes, loop: bool) -> None:
        self._check_alive()
        self.buffer = (bytes(data), bool(loop))

    def start(self) -> None:
        self._check_alive()
        self.playing = True

    def stop(self) -> None:
        self._check_alive()
        self.playing = False

    def flush(self) -> None:
        self._check_alive()
        had_buffer = self.buffer is not None
        self.buffer = None
        if had_buffer:
            self._notify_buffer_end()

    def set_volume(self, volume: float) -> None:
        self._check_alive()
        self.volume = volume

    def set_frequency_ratio(self, ratio: float) -> None:
        self._check_alive()
        self.frequency_ratio = ratio

    def destroy(self) -> None:
        self.playing = False
        self.buffer = None
        self.destroyed = True


class Channel:
    """One voice of a sound system; plays a single sound at a time."""

    def __init__(self, system: "SoundSystem", voice: Voice) -> None:
        self._system = system
        self.voice = voice
        self.sound: Optional["Sound"] = None
        self.volume = DEFAULT_VOLUME
        self.playback_speed = DEFAULT_PLAYBACK_SPEED
        voice.buffer_end_callback = self.on_buffer_end

    def _start(self, sound: "Sound", loop: bool) -> None:
        if self.sound is not None:
            raise RuntimeError("the channel is already playing a sound")
        sound._add_channel(self)
        self.sound = sound
        self.voice.set_volume(self.volume)
        self.voice.submit(sound.wave.samples, loop)
        self.voice.start()

    def _require_sound(self) -> None:
        if self.sound is None:
            raise RuntimeError("the channel is not playing a sound")

    def play(self, sound: "Sound") -> None:
        """Play ``sound`` once."""
        self._start(sound, loop=False)

    def play_in_loop(self, sound: "Sound") -> None:
        """Play ``sound`` repeatedly until stopped."""
        self._start(sound, loop=True)

    def stop(self) -> None:
        """Stop the sound; the channel returns to the system once its buffer ends."""
        self._require_sound()
        self.voice.stop()
        self.voice.flush()

    def pause(self) -> None:
        self._require_sound()
        self.voice.stop()

    def resume(self) -> None:
        self._require_sound()
        self.voice.start()

    def increase_volume(self) -> None:
        self.set_volume(self.volume + VOLUME_STEP)

    def decrease_volume(self) -> None:
        self.set_volume(max(self.volume - VOLUME_STEP, MIN_VOLUME))

    def set_volume(self, volume: float) -> None:
        self.volume = volume
        self.voice.set_volume(volume)

    def increase_playback_speed(self) -> None:
        self.set_playback_speed(self.playback_speed + SPEED_STEP)

    def decrease_playback_speed(self) -> None:
        self.set_playback_speed(max(self.playback_speed - SPEED_STEP, MIN_PLAYBACK_SPEED))

    def set_playback_speed(self, speed: float) -> None:
        self.playback_speed = speed
        self.voice.set_frequency_ratio(speed)

    def on_buffer_end(self) -> None:
        """Detach from the finished sound and hand the channel back to the system."""
        sound = self.sound
        if sound is None:
            return
        sound._remove_channel(self)
        self.sound = None
        self._system.deactivate_channel(self)

    def close(self) -> None:
        """Detach from any sound and destroy the voice."""
        if self.sound is not None:
            self.sound._remove_channel(self)
            self.sound = None
        self.voice.destroy()


class Sound:
    """Wave samples that can be played on any number of channels at once."""

    def __init__(self, system: "SoundSystem", wave: WaveData) -> None:
        self.system = system
        self.wave = wave
        self._channels: List[Channel] = []
        self._lock = threading.Lock()

    @classmethod
    def from_file(cls, system: "SoundSystem", path: Union[str, os.PathLike]) -> "Sound":
        return cls(system, load_wave(path))

    @property
    def active_channels(self) -> Tuple[Channel, ...]:
        with self._lock:
            return tuple(self._channels)

    def _add_channel(self, channel: Channel) -> None:
        with self._lock:
            self._channels.append(channel)

    def _remove_channel(self, channel: Channel) -> None:
        with self._lock:
            self._channels.remove(channel)

    def play(self) -> Optional[Channel]:
        """Play once on a free channel; returns None when every channel is busy."""
        return self.system.play_sound(self)

    def play_in_loop(self) -> Optional[Channel]:
        return self.system.play_sound_in_loop(self)

    def stop(self) -> None:
        for channel in self.active_channels:
            channel.stop()

    def pause(self) -> None:
        for channel in self.active_channels:
            channel.pause()

    def resume(self) -> None:
        for channel in self.active_channels:
            channel.resume()

    def increase_volume(self) -> None:
        for channel in self.active_channels:
            channel.increase_volume()

    def decrease_volume(self) -> None:
        for channel in self.active_channels:
            channel.decrease_volume()

    def set_volume(self, volume: float) -> None:
        for channel in self.active_channels:
            channel.set_volume(volume)

    def increase_playback_speed(self) -> None:
        for channel in self.active_channels:
            channel.increase_playback_speed()

    def decrease_playback_speed(self) -> None:
        for channel in self.active_channels:
            channel.decrease_playback_speed()

    def set_playback_speed(self, speed: float) -> None:
        for channel in self.active_channels:
            channel.set_playback_speed(speed)


class SoundSystem:
    """Owns a fixed pool of channels, lending idle ones to sounds that start playing."""

    def __init__(
        self,
        voice_factory: Callable[[], Voice] = SilentVoice,
        channel_count: int = DEFAULT_CHANNEL_COUNT,
    ) -> None:
        if channel_count < 0:
            raise ValueError("channel_count must not be negative")
        self.format = DEFAULT_FORMAT
        self._lock = threading.RLock()
        self._active: List[Channel] = []
        self._idle: List[Channel] = [Channel(self, voice_factory()) for _ in range(channel_count)]

    def __enter__(self) -> "SoundSystem":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def idle_channels(self) -> Tuple[Channel, ...]:
        with self._lock:
            return tuple(self._idle)

    @property
    def active_channels(self) -> Tuple[Channel, ...]:
        with self._lock:
            return tuple(self._active)

    def _take_channel(self) -> Optional[Channel]:
        with self._lock:
            if not self._idle:
                return None
            channel = self._idle.pop()
            self._active.append(channel)
            return channel

    def play_sound(self, sound: Sound) -> Optional[Channel]:
        """Play ``sound`` once on an idle channel, or do nothing if there is none."""
        channel = self._take_channel()
        if channel is not None:
            channel.play(sound)
        return channel

    def play_sound_in_loop(self, sound: Sound) -> Optional[Channel]:
        channel = self._take_channel()
        if channel is not None:
            channel.play_in_loop(sound)
        return channel

    def deactivate_channel(self, channel: Channel) -> None:
        """Move ``channel`` from the active pool back to the idle pool."""
        with self._lock:
            for position, candidate in enumerate(self._active):
                if candidate is channel:
                    del self._active[position]
                    self._idle.append(channel)
                    return
        raise ValueError("the channel is not active in this sound system")

    def close(self) -> None:
        """Destroy every channel's voice."""
        with self._lock:
            channels = self._active + self._idle
            self._active.clear()
            self._idle.clear()
        for channel in channels:
            channel.close()