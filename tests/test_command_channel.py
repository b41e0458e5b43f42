import pytest

from walkassist.logic.state import PerceptionState, Surroundings
from walkassist.voice.command_channel import VoiceCommandChannel
from walkassist.voice.commands import Command, key_to_command, parse_command
from walkassist.voice.speech_formatter import SpeechFormatter
from walkassist.voice.stt_vosk import VoskSession


class FakeSession:
    def __init__(self, available=True):
        self.available = available
        self.starts = 0
        self.stops = 0
        self.on_result = None
        self.on_error = None
        self.on_end = None

    def start(self):
        self.starts += 1

    def stop(self):
        self.stops += 1

    # helpers driving the channel like a real recognizer would
    def say(self, text):
        self.on_result(text)

    def fail(self, exc):
        self.on_error(exc)
        self.on_end()


class FakeAnnouncer:
    def __init__(self):
        self.announced = []
        self.stopped = 0

    def announce(self, text):
        self.announced.append(text)
        return True

    def stop_speaking(self):
        self.stopped += 1


@pytest.fixture
def parts():
    session = FakeSession()
    state = PerceptionState()
    announcer = FakeAnnouncer()
    camera_starts = []
    channel = VoiceCommandChannel(
        session,
        lambda: state,
        announcer,
        lambda: camera_starts.append(True),
        restart_delay_s=0,
    )
    return channel, session, state, announcer, camera_starts


@pytest.mark.parametrize(
    "text,expected",
    [
        ("What do you see?", Command.DESCRIBE),
        ("  describe my SURROUNDINGS please ", Command.DESCRIBE),
        ("Stop speaking.", Command.STOP_SPEAKING),
        ("please start camera", Command.START_CAMERA),
        ("what time is it", Command.UNKNOWN),
        ("", Command.UNKNOWN),
    ],
)
def test_parse_command(text, expected):
    assert parse_command(text) is expected


def test_key_commands():
    assert key_to_command(ord("d")) is Command.DESCRIBE
    assert key_to_command(ord("S")) is Command.STOP_SPEAKING
    assert key_to_command(255) is Command.UNKNOWN
    assert key_to_command(ord("x")) is Command.UNKNOWN


def test_describe_reads_shared_state(parts):
    channel, session, state, announcer, _ = parts
    state.update(
        surroundings=Surroundings(left=("person",), center=("car", "bicycle")),
        current_distance=2.04,
    )
    channel.start()
    session.say("what do you see")
    assert announcer.announced == [
        "Surroundings: person on your left. car, bicycle in front. "
        "Closest object about 2 meters away."
    ]


def test_describe_with_empty_state(parts):
    channel, session, _, announcer, _ = parts
    channel.start()
    session.say("surroundings")
    assert announcer.announced == [SpeechFormatter.CLEAR]


def test_stop_speaking_and_start_camera(parts):
    channel, session, _, announcer, camera_starts = parts
    channel.start()
    session.say("stop speaking")
    session.say("start camera")
    assert announcer.stopped == 1
    assert camera_starts == [True]


def test_unmatched_utterance_is_ignored(parts):
    channel, session, _, announcer, camera_starts = parts
    channel.start()
    assert channel.handle_utterance("hello there") is Command.UNKNOWN
    assert announcer.announced == []
    assert announcer.stopped == 0
    assert camera_starts == []


def test_session_restarts_after_end_and_error(parts):
    channel, session, _, _, _ = parts
    channel.start()
    assert session.starts == 1
    session.on_end()
    session.fail(RuntimeError("network"))
    session.fail(RuntimeError("no-speech"))
    assert session.starts == 4
    assert channel.restarts == 3
    assert channel.running


def test_no_restart_after_stop(parts):
    channel, session, _, _, _ = parts
    channel.start()
    channel.stop()
    channel.stop()
    session.on_end()
    assert session.starts == 1
    assert session.stops == 1
    assert not channel.running


def test_delayed_restart_is_cancelled_by_stop():
    session = FakeSession()
    channel = VoiceCommandChannel(
        session, PerceptionState, FakeAnnouncer(), lambda: None, restart_delay_s=60
    )
    channel.start()
    session.on_end()
    channel.stop()
    assert session.starts == 1


def test_unsupported_recognition_disables_channel():
    session = FakeSession(available=False)
    channel = VoiceCommandChannel(session, PerceptionState, FakeAnnouncer(), lambda: None)
    assert channel.start() is False
    assert session.starts == 0
    assert not channel.running


def test_start_is_idempotent(parts):
    channel, session, _, _, _ = parts
    assert channel.start()
    assert channel.start()
    assert session.starts == 1


def test_vosk_session_without_model_is_unavailable(tmp_path):
    session = VoskSession(model_path=str(tmp_path / "missing-model"))
    assert not session.available
    session.start()
    assert not session.running
    session.stop()
