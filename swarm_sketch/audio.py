"""
Audio feature bridge
Listens to the microphone (or a WAV file) and exposes two live readings:
amplitude (RMS, 0-1) and dominant frequency (Hz).

Microphone flow:
    NOT_REQUESTED -> REQUESTED -> STARTED | DENIED | RESTRICTED | FAILED

request_access() returns a Future. The sketch calls poll() every frame, which
consumes the finished Future on the render thread and starts the stream when
access was granted. A failed start is final for the run.
"""

import math
import sys
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum

import numpy as np

from .console import print

# Reference pitches for octave 0, C through B
NOTE_FREQUENCIES = [16.35, 17.32, 18.35, 19.45, 20.6, 21.83, 23.12, 24.5, 25.96, 27.5, 29.14, 30.87]
NOTE_NAMES_WITH_SHARPS = ["C", "C♯", "D", "D♯", "E", "F", "F♯", "G", "G♯", "A", "A♯", "B"]
NOTE_NAMES_WITH_FLATS = ["C", "D♭", "D", "E♭", "E", "F", "G♭", "G", "A♭", "A", "B♭", "B"]


def note_name(frequency):
    """Nearest note for a frequency as (name_with_sharps, name_with_flats), e.g. ('A4', 'A4')"""
    if frequency <= 0:
        return None

    folded = float(frequency)
    while folded > NOTE_FREQUENCIES[-1]:
        folded /= 2.0
    while folded < NOTE_FREQUENCIES[0]:
        folded *= 2.0

    index = min(range(len(NOTE_FREQUENCIES)), key=lambda i: abs(NOTE_FREQUENCIES[i] - folded))
    octave = int(math.log2(frequency / folded))

    return f"{NOTE_NAMES_WITH_SHARPS[index]}{octave}", f"{NOTE_NAMES_WITH_FLATS[index]}{octave}"


class PermissionStatus(Enum):
    AUTHORIZED = 'authorized'
    NOT_DETERMINED = 'not_determined'
    DENIED = 'denied'
    RESTRICTED = 'restricted'


class BridgeState(Enum):
    NOT_REQUESTED = 'not_requested'
    REQUESTED = 'requested'
    STARTED = 'started'
    DENIED = 'denied'
    RESTRICTED = 'restricted'
    FAILED = 'failed'


class FrequencyTracker:
    """Amplitude and dominant-frequency estimate over a rolling mono buffer

    `amplitude` and `frequency` are plain floats. The audio thread writes them
    and the render thread reads them without locking; a reading one block old
    is fine for drawing.
    """

    def __init__(self, sample_rate, fft_size=4096, min_frequency=20.0):
        self.sample_rate = float(sample_rate)
        self.fft_size = int(fft_size)
        self.buffer = np.zeros(self.fft_size, dtype=np.float32)
        self.window = np.hamming(self.fft_size).astype(np.float32)
        # Skip DC and anything below the audible range
        self.lowest_bin = max(1, int(math.ceil(min_frequency * self.fft_size / self.sample_rate)))

        self.amplitude = 0.0
        self.frequency = 0.0

    def process(self, samples):
        """Feed a block of float samples in [-1, 1]"""
        samples = np.asarray(samples, dtype=np.float32).ravel()
        n = samples.size
        if n == 0:
            return

        self.amplitude = float(min(1.0, np.sqrt(np.mean(samples.astype(np.float64) ** 2))))

        # Roll in place and append the new block
        if n >= self.fft_size:
            self.buffer[:] = samples[-self.fft_size:]
        else:
            self.buffer[:-n] = self.buffer[n:]
            self.buffer[-n:] = samples

        spectrum = np.abs(np.fft.rfft(self.buffer * self.window))
        search = spectrum[self.lowest_bin:]
        if search.size == 0:
            return
        peak = self.lowest_bin + int(np.argmax(search))
        if spectrum[peak] <= 1e-9:
            # Silence: keep the last estimate
            return

        # Parabolic interpolation on log magnitudes around the peak bin
        offset = 0.0
        if 0 < peak < spectrum.size - 1:
            a, b, c = np.log(spectrum[peak - 1:peak + 2] + 1e-12)
            denom = a - 2.0 * b + c
            if denom != 0:
                offset = 0.5 * (a - c) / denom

        self.frequency = float((peak + offset) * self.sample_rate / self.fft_size)


class AudioFeatures:
    """Interface the sketch reads from; a silent source that is never active"""

    def request_access(self):
        future = Future()
        future.set_result(PermissionStatus.RESTRICTED)
        return future

    def poll(self):
        pass

    def is_active(self):
        return False

    def amplitude(self):
        return 0.0

    def frequency(self):
        return 0.0

    def stop(self):
        pass


class MicrophoneFeatures(AudioFeatures):
    """Live features from the default input device through sounddevice

    `remembered` is the stored access decision ('authorized', 'denied' or
    None) and `on_decision` is called after a successful device check, so the
    app can persist it. A failed check is not remembered: it only fails this run.
    """

    def __init__(self, block_size=1024, fft_size=4096, enabled=True, remembered=None,
                 on_decision=None, backend=None):
        self.block_size = block_size
        self.fft_size = fft_size
        self.enabled = enabled
        self.remembered = remembered
        self.on_decision = on_decision
        self._backend = backend

        self.state = BridgeState.NOT_REQUESTED
        self.tracker = None
        self._stream = None
        self._future = None
        self._executor = None
        self._check_error = None

    def _sounddevice(self):
        if self._backend is None:
            # Imported lazily: PortAudio may be missing on headless machines
            import sounddevice
            self._backend = sounddevice
        return self._backend

    def _input_device(self):
        return self._sounddevice().query_devices(kind='input')

    def authorization_status(self):
        """Current permission for the microphone"""
        if not self.enabled:
            return PermissionStatus.DENIED
        try:
            device = self._input_device()
        except Exception as e:
            print(f"No audio input available: {e}", debug_only=True)
            return PermissionStatus.RESTRICTED
        if device['max_input_channels'] < 1:
            return PermissionStatus.RESTRICTED
        if self.remembered == PermissionStatus.AUTHORIZED.value:
            return PermissionStatus.AUTHORIZED
        if self.remembered == PermissionStatus.DENIED.value:
            return PermissionStatus.DENIED
        return PermissionStatus.NOT_DETERMINED

    def request_access(self):
        """Ask for microphone access; the result arrives through the returned Future"""
        if self._future is not None:
            return self._future

        self.state = BridgeState.REQUESTED
        status = self.authorization_status()

        if status == PermissionStatus.NOT_DETERMINED:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='mic-permission')
            self._future = self._executor.submit(self._check_device)
        else:
            if status == PermissionStatus.AUTHORIZED:
                print("User has previously granted microphone access.")
            self._future = Future()
            self._future.set_result(status)
        return self._future

    def _check_device(self):
        """Open and close a short stream on the default input to see if we may listen"""
        try:
            device = self._input_device()
            with self._sounddevice().InputStream(channels=1,
                                                 samplerate=device['default_samplerate'],
                                                 blocksize=self.block_size):
                pass
        except Exception as e:
            # Busy or broken device: undecided, and poll() fails this run only
            self._check_error = e
            return PermissionStatus.NOT_DETERMINED

        self.remembered = PermissionStatus.AUTHORIZED.value
        if self.on_decision is not None:
            self.on_decision(self.remembered)
        return PermissionStatus.AUTHORIZED

    def poll(self):
        """Consume a finished permission request (call once per frame)"""
        if self.state != BridgeState.REQUESTED or self._future is None or not self._future.done():
            return self.state

        status = self._future.result()
        if status == PermissionStatus.AUTHORIZED:
            print("Microphone access granted.", debug_only=True)
            self.start()
        elif status == PermissionStatus.DENIED and not self.enabled:
            print("Microphone disabled, colours follow the hue timer only.")
            self.state = BridgeState.DENIED
        elif status == PermissionStatus.DENIED:
            print("Error: User did not grant microphone access.", file=sys.stderr)
            self.state = BridgeState.DENIED
        elif status == PermissionStatus.NOT_DETERMINED:
            print(f"Error: Audio engine did not start: {self._check_error}", file=sys.stderr)
            self.state = BridgeState.FAILED
        else:
            print("Error: Microphone access is restricted on this system.", file=sys.stderr)
            self.state = BridgeState.RESTRICTED

        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
        return self.state

    def start(self):
        """Open the input stream at the device's own sample rate; no retry on failure"""
        if self.state in (BridgeState.STARTED, BridgeState.FAILED):
            return self.state == BridgeState.STARTED
        try:
            sd = self._sounddevice()
            device = self._input_device()
            sample_rate = int(device['default_samplerate'])
            self.tracker = FrequencyTracker(sample_rate, fft_size=self.fft_size)
            self._stream = sd.InputStream(
                channels=1,
                samplerate=sample_rate,
                blocksize=self.block_size,
                dtype='float32',
                callback=self._audio_callback
            )
            self._stream.start()
        except Exception as e:
            print(f"Error: Audio engine did not start: {e}", file=sys.stderr)
            self._stream = None
            self.state = BridgeState.FAILED
            return False

        print(f"✓ Microphone analysis started ({sample_rate}Hz, block={self.block_size})")
        self.state = BridgeState.STARTED
        return True

    def _audio_callback(self, indata, frames, time_info, status):
        if status:
            print(f"Audio callback status: {status}", debug_only=True)
        self.tracker.process(indata[:, 0])

    def is_active(self):
        return self.state == BridgeState.STARTED

    def amplitude(self):
        return self.tracker.amplitude if self.tracker is not None else 0.0

    def frequency(self):
        return self.tracker.frequency if self.tracker is not None else 0.0

    def stop(self):
        if self._stream is not None:
            try:
                self._stream.stop()
                self._stream.close()
            except Exception as e:
                print(f"Error closing audio stream: {e}", debug_only=True)
            self._stream = None
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
        if self.state == BridgeState.STARTED:
            self.state = BridgeState.NOT_REQUESTED


class WaveFileFeatures(AudioFeatures):
    """Features from a WAV file, stepped one video frame at a time"""

    def __init__(self, path, fft_size=4096):
        from scipy.io import wavfile

        rate, data = wavfile.read(str(path))
        self.sample_rate = int(rate)
        self.samples = self._to_mono_float(data)
        self.tracker = FrequencyTracker(self.sample_rate, fft_size=fft_size)

    @staticmethod
    def _to_mono_float(data):
        if data.dtype == np.int16:
            samples = data.astype(np.float32) / 32768.0
        elif data.dtype == np.int32:
            samples = data.astype(np.float32) / 2147483648.0
        elif data.dtype == np.uint8:
            samples = (data.astype(np.float32) - 128.0) / 128.0
        else:
            samples = data.astype(np.float32)
        if samples.ndim > 1:
            samples = samples.mean(axis=1)
        return samples

    @property
    def duration(self):
        return self.samples.size / self.sample_rate

    def advance(self, frame_index, fps):
        """Feed the samples that play during `frame_index` at `fps`"""
        start = int(frame_index * self.sample_rate / fps)
        end = int((frame_index + 1) * self.sample_rate / fps)
        block = self.samples[start:end]
        if block.size:
            self.tracker.process(block)

    def is_active(self):
        return True

    def amplitude(self):
        return self.tracker.amplitude

    def frequency(self):
        return self.tracker.frequency
