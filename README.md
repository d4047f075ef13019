# enginecore

Building blocks for a small game engine, written as an ordinary Python library
with no dependencies beyond the standard library.

## What is inside

- `enginecore.asserts`: development-time assertions.
  - `AssertionSite(line_number, file, handler)` stands for one place in the code that asserts.
    `check(condition, message, *args)` returns whether the condition holds.
  - When it does not, the text from `format_assertion_message` (printf-style `%` formatting,
    cut to a 512-character buffer) goes to the handler, which answers with an `AssertResponse`:
    `BREAK` raises `AssertionBreak`, `CONTINUE` carries on, and `IGNORE` silences that site
    from then on. A handler that answers `None` is treated as `BREAK`.
  - The default handler writes the message and a prompt to standard error and asks to break.
  - Checks are skipped when Python runs with `-O`.
- `enginecore.handle`: `Handle`, a frozen 32-bit value.
  - It packs a 20-bit `index` and a 12-bit error-checking `id`.
  - `Handle.from_parts`, `Handle.invalid()` and `Handle.next_id` (which wraps around) build and
    step handles; a handle is true when it is valid.
- `enginecore.refcount`: `ReferenceCountedAsset`, a base class whose instances start with one
  reference.
  - `increment_reference_count()` and `decrement_reference_count()` return the new count, and
    `destroy()` is called once when it reaches zero.
  - Use after destruction or overflow raises `ReferenceCountError`.
- `enginecore.manager`: `AssetManager(loader)`.
  - `load(path, *args, **kwargs)` calls the loader only the first time a path is loaded and
    returns a `Handle`; later loads of the same path count another reference.
  - `get(handle)` returns the asset. `release(handle)` drops a reference and returns an invalid
    handle for the caller to keep; the last release calls the asset's
    `decrement_reference_count()`.
  - Stale or foreign handles raise `InvalidHandleError`. `clean_up()`, also run on leaving a
    `with` block, raises `AssetError` if assets were never released.
- `enginecore.wave`: `parse_wave(data)` and `load_wave(path)`.
  - They read RIFF/WAVE bytes into a `WaveData` holding a `WaveFormat` and the sample bytes.
  - Malformed input raises `WaveFormatError`.
- `enginecore.audio`: a `SoundSystem` with a fixed pool of `Channel`s (64 by default) that play
  `Sound`s.
  - `Sound.play()` and `Sound.play_in_loop()` take an idle channel, or return `None` when none
    is free.
  - Stop, pause, resume, volume and playback-speed controls act on every channel playing the
    sound. Volume steps by 0.1 and never goes below 0; speed steps by 0.1 and never goes
    below 0.1.
  - A channel returns to the idle pool when its buffer ends.
  - Output goes through any `Voice` implementation; `SilentVoice` keeps the state a voice would
    have without making sound.
- `enginecore.timing`: `FixedStepClock`.
  - `advance(elapsed_ticks)` turns elapsed system ticks (nanoseconds) into whole fixed-size
    simulation updates, reported as a `FrameStep`.
  - At most 0.5 s of system time counts per iteration, and at most 5 updates are run per
    iteration.
  - `seconds_to_ticks` and `ticks_to_seconds` convert between the two units.

## Install

```
pip install .
```

## Examples

Loading assets through a manager:

```python
from enginecore.manager import AssetManager
from enginecore.refcount import ReferenceCountedAsset

class Texture(ReferenceCountedAsset):
    def __init__(self, path):
        super().__init__()
        self.path = path

textures = AssetManager(Texture)
first = textures.load("grass.png")
second = textures.load("grass.png")   # same asset, one more reference
assert textures.get(first) is textures.get(second)
textures.release(first)
textures.release(second)
textures.clean_up()
```

Playing a sound without an audio device:

```python
from enginecore.audio import SilentVoice, Sound, SoundSystem

system = SoundSystem(SilentVoice, 4)
sound = Sound.from_file(system, "click.wav")
sound.play()
sound.set_volume(0.8)
sound.stop()
system.close()
```

A fixed-step simulation clock:

```python
from enginecore.timing import FixedStepClock, seconds_to_ticks

clock = FixedStepClock(1 / 15, 1.0, 0.5, 5)
step = clock.advance(seconds_to_ticks(0.2))
print(step.update_count)   # 3
```

## What it does not do

- There is no application base class, window, render thread or main loop. `FixedStepClock`
  works out how many simulation updates a loop iteration should run, but driving the loop,
  reading the system clock and rendering are left to the program using it.
- There is no audio output. `SilentVoice` plays nothing; real sound needs a `Voice`
  implementation backed by an audio library.
- There is no command-line program.

## Tests

```
pip install .[test]
pytest
```