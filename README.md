# defusekit

These are puzzle modules from a cooperative bomb-defusal game. Each module
is a plain state machine driven by a microsecond clock, so you can play
them, script them and test them in software.

## Modules

- `defusekit.game`: **Wave Match** (`WaveGame`). Two pots set the frequency
  and amplitude of a player sine wave, and the player steers it onto a
  random target (`new_target`).
  - To lock a round, both values must be within tolerance and the pots
    must be held still.
  - After `rounds_needed()` rounds the module waits for 15 seconds and then
    completes.
  - If the player leaves the new target during that wait and then locks
    back onto it after the grace period, that counts as a strike. Taking
    too long in a round also gives a strike.
  - `update(player_freq, player_amp, now_us)` returns an `Event`:
    `NONE`, `STRIKE` or `COMPLETE`.
- `defusekit.blast_gauge`: **Blast Gauge** (`BlastGauge`). A servo needle
  sweeps over a ring of LED zones, and the first button press arms the
  module.
  - Round 1: stop in the named zone.
  - Round 2: stop in the green cluster.
  - Round 3: stop in the named zone while the zones rotate.
  - Each round sweeps faster than the one before.
  - A wrong stop gives a strike and repeats the round.
  - Also in this module: `ButtonDebouncer`, which turns a raw button level
    into one press edge, and the `LedRing` and `Servo` models.
- `defusekit.morse`: **Morse** (`MorseGame`). The module picks a word from
  `WORD_BANK`, and its index is shown as a 3-bit LED pattern.
  - Input comes from `receive(c, now_us)`: `.` is a dot, `-` a dash, space
    a letter gap and newline submits.
  - `button_release(held_ms, now_us)` also enters symbols: a press of up to
    200 ms is a dot, anything longer is a dash.
  - `tick(now_us)` applies the letter and submit timeouts and checks
    submissions.
  - Three wrong words, or running out of time, explode the module.
  - Status messages (`READY`, `STRIKE`, `DEFUSED`, `EXPLODED`) go to the
    `send` callback.
  - `decode` turns one pattern into a letter. `translate_key` maps the test
    keys `f`, `p`, `v` and `s` to dot, dash, gap and submit.
- `defusekit.link`: `Link` sends the one-byte event protocol. The upper
  three bits hold the `EventType` (`STRIKE`, `SOLVED`) and the lower five
  bits the `Module` (`KRISH`, `MYLES`, `MORSE`).
- `defusekit.display`: `Display` is an in-memory RGB565 frame buffer with a
  5x7 font (`glyph`, `draw_char`, `draw_string`).
- `defusekit.led`: `RgbLed` models the status LED and records every
  colour it is set to.
- `defusekit.inputs`: `PotInputs` handles smoothed pot readings, read
  through a `read_adc(channel)` callback.
- `defusekit.waves`: `compute_wave`, `draw_target` and `draw_player`
  compute and plot the sine waves.
- `defusekit.audio`: `AudioEngine` is a wavetable tone generator. It beeps
  once a second while the wave game is in `PLAYING` and plays a falling
  boom when it reaches `COMPLETE`. `next_sample()` gives the PWM level of
  each sample.
- `defusekit.board`: `SlaveBoard` runs Wave Match and Blast Gauge side by
  side, one frame per `tick(now_us, button_down)`.
  - Strikes and solves are sent over the link.
  - `tick` returns a list of `(EventType, Module)` pairs.
  - `status_lines()` gives the two status lines drawn under the plot.

## Installation

```
pip install .
```

## Running

```
defusekit --frames 600 --seed 1 --freq-raw 2000 --amp-raw 1500 --press 10
```

This runs `SlaveBoard` for a fixed number of 33 ms frames, with both pots
held at the given raw ADC values (0..4095). Each `--press FRAME` holds the
button down for three frames starting at that frame, and the option can
be given more than once. Every link byte is printed as `link 0xNN`, and
the final status lines are printed at the end. The defaults are 300
frames, a random seed, both pots at 0 and no presses.

## Using it from Python

```python
import random
from defusekit.game import WaveGame, Event
from defusekit.led import RgbLed

game = WaveGame(RgbLed(), random.Random(1))
event = game.update(5.0, 30.0, now_us=0)
if event is Event.STRIKE:
    print("strike!")
print(game.target, game.rounds_needed())
```

```python
from defusekit.link import Link

sent = bytearray()
link = Link(sent.extend)
link.send_solved("MYLES")
assert bytes(sent) == b"\x21"
```

## What it does not do

- It does not drive any real hardware. The screen, LEDs, servo, LED ring
  and buzzer are in-memory models, and pot readings come from a callback
  you supply.
- The command-line simulation is not interactive and shows no window. It
  only prints link bytes and status lines.
- `SlaveBoard` does not run the Morse module or the audio engine. Use
  `MorseGame` and `AudioEngine` directly.

## Tests

```
pip install .[test]
pytest
```