"""Playback transport using sounddevice."""

from __future__ import annotations

import numpy as np
import sounddevice as sd

from PySide6.QtCore import QObject, QTimer, Signal, Slot

from wavecursorlib.models import SampleBuffer

from .log import dbg


class PlaybackController(QObject):
    """Plays a SampleBuffer through a sounddevice OutputStream.

    Signals:
        cursor_updated(int): Current frame, every ``interval_ms`` while playing.
        duration_changed(int): Frame count of the buffer handed to ``play``.
        playback_finished(): Playback reached the end of the buffer.
        error(str): The output stream could not be opened.
    """

    cursor_updated = Signal(int)
    duration_changed = Signal(int)
    playback_finished = Signal()
    error = Signal(str)

    def __init__(self, parent=None, interval_ms: int = 30):
        super().__init__(parent)
        self._stream: sd.OutputStream | None = None
        self._start_frame: int = 0
        self._frames_played: list[int] = [0]

        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._on_timer)

    @property
    def is_playing(self) -> bool:
        return self._stream is not None and self._stream.active

    def play(self, buffer: SampleBuffer | None, start_frame: int = 0):
        """Start playback of *buffer* from *start_frame*."""
        self.stop()
        if buffer is None or buffer.is_empty:
            return

        audio = buffer.data
        if audio.shape[1] > 2:
            # devices rarely take more than stereo: even → L, odd → R
            audio = np.column_stack([
                audio[:, 0::2].mean(axis=1),
                audio[:, 1::2].mean(axis=1),
            ])
        audio = audio.astype(np.float32)

        if start_frame >= audio.shape[0]:
            start_frame = 0
        self._start_frame = start_frame
        self._frames_played = [0]
        play_data = audio[start_frame:]
        played = self._frames_played

        def callback(outdata, frames, time_info, status):
            pos = played[0]
            end = pos + frames
            if end <= len(play_data):
                outdata[:] = play_data[pos:end]
                played[0] = end
            else:
                remaining = len(play_data) - pos
                if remaining > 0:
                    outdata[:remaining] = play_data[pos:]
                outdata[remaining:] = 0
                played[0] = len(play_data)
                raise sd.CallbackStop()

        self.duration_changed.emit(buffer.frame_count)
        try:
            self._stream = sd.OutputStream(
                samplerate=buffer.sample_rate,
                channels=audio.shape[1],
                dtype="float32",
                callback=callback,
                finished_callback=self._on_finished_sd,
            )
            self._stream.start()
            self._timer.start()
            dbg(f"playing from frame {start_frame}")
        except (sd.PortAudioError, ValueError) as e:
            self._stream = None
            self.error.emit(str(e))

    def stop(self):
        self._timer.stop()
        if self._stream is not None:
            stream, self._stream = self._stream, None
            try:
                stream.stop()
                stream.close()
            except sd.PortAudioError as e:
                dbg(f"closing stream failed: {e}")

    def current_frame(self) -> int:
        return self._start_frame + self._frames_played[0]

    def _on_finished_sd(self):
        """Called by sounddevice from the audio thread when playback ends."""
        QTimer.singleShot(0, self._on_finished_main)

    @Slot()
    def _on_finished_main(self):
        if self._stream is not None and self._stream.active:
            return  # a newer stream has started meanwhile
        self._timer.stop()
        self._stream = None
        self.cursor_updated.emit(self.current_frame())
        self.playback_finished.emit()

    @Slot()
    def _on_timer(self):
        if self._stream is not None:
            self.cursor_updated.emit(self.current_frame())
