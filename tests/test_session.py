import json
from contextlib import contextmanager

import pytest

from cc_switch.errors import TerminalUnavailable
from cc_switch.layout import TerminalCaps
from cc_switch.profiles import Profile, WriteMode
from cc_switch.prompts.editor import EditOutcome, EditResult, edit_profile
from cc_switch.prompts.session import MenuContext, run_main_menu, run_selection
from cc_switch.store import ConfigurationStore


def scripted(*answers):
    """Fake input; ``None`` entries and exhaustion raise EOFError."""
    it = iter(answers)

    def fake_input(prompt=""):
        value = next(it, None)
        if value is None:
            raise EOFError
        return value
    return fake_input


def no_terminal():
    raise TerminalUnavailable("not a tty")


class Recorder:
    def __init__(self, events=None, code=0):
        self.calls = []
        self.events = events if events is not None else []
        self.code = code

    def __call__(self, bag):
        self.calls.append(None if bag is None else dict(bag))
        self.events.append("launch")
        return self.code


class FakeTerm:
    def __init__(self, keys, events):
        self.keys = list(keys)
        self.events = events
        self.active = False
        self.frames = []

    def __enter__(self):
        self.active = True
        self.events.append("acquire")
        return self

    def __exit__(self, *exc):
        self.active = False
        self.events.append("release")

    @contextmanager
    def suspended(self):
        self.active = False
        self.events.append("suspend")
        try:
            yield
        finally:
            self.active = True
            self.events.append("resume")

    def draw(self, lines):
        self.frames.append(list(lines))

    def read_key(self):
        return self.keys.pop(0)


def make_store(tmp_path, mode=None):
    store = ConfigurationStore(path=tmp_path / "store" / "configurations.json")
    store.add(Profile("alpha", "tok-a", "https://a"))
    store.add(Profile("beta", "t", "u", small_fast_model="x"))
    if mode is not None:
        store.set_default_mode(mode)
    store.save()
    return store


def make_ctx(tmp_path, store, launcher, **kw):
    kw.setdefault("session_factory", no_terminal)
    kw.setdefault("environ", {})
    return MenuContext(
        store,
        caps=TerminalCaps(unicode=True, color=False, width=100),
        launcher=launcher,
        home=tmp_path,
        **kw,
    )


def settings_env(tmp_path):
    path = tmp_path / ".claude" / "settings.json"
    return json.loads(path.read_text(encoding="utf-8")).get("env", {})


def test_line_fallback_digit_launches_profile(tmp_path, capsys):
    launcher = Recorder(code=7)
    ctx = make_ctx(tmp_path, make_store(tmp_path), launcher, input_fn=scripted("2"))
    assert run_selection(ctx) == 7
    assert launcher.calls == [
        {
            "ANTHROPIC_AUTH_TOKEN": "t",
            "ANTHROPIC_BASE_URL": "u",
            "ANTHROPIC_SMALL_FAST_MODEL": "x",
        }
    ]
    assert "  2) beta" in capsys.readouterr().out


def test_line_fallback_official_resets_settings(tmp_path):
    settings = tmp_path / ".claude" / "settings.json"
    settings.parent.mkdir(parents=True)
    settings.write_text(json.dumps({"env": {"ANTHROPIC_MODEL": "old"}}), encoding="utf-8")
    launcher = Recorder()
    ctx = make_ctx(tmp_path, make_store(tmp_path), launcher, input_fn=scripted("r"))
    assert run_selection(ctx) == 0
    assert launcher.calls == [{}]
    assert settings_env(tmp_path) == {}


def test_line_fallback_exit_and_cancel(tmp_path):
    launcher = Recorder()
    store = make_store(tmp_path)
    assert run_selection(make_ctx(tmp_path, store, launcher, input_fn=scripted("q"))) == 0
    assert run_selection(make_ctx(tmp_path, store, launcher, input_fn=scripted())) is None
    assert launcher.calls == []


def test_line_fallback_rejects_garbage(tmp_path, capsys):
    launcher = Recorder()
    ctx = make_ctx(
        tmp_path, make_store(tmp_path), launcher, input_fn=scripted("zz", "7", "x", "q")
    )
    assert run_selection(ctx) == 0
    assert capsys.readouterr().out.count("Invalid choice.") == 3


def test_line_fallback_edit_then_select(tmp_path):
    edited = []

    def fake_editor(store, alias, caps=None, input_fn=None):
        edited.append(alias)
        return EditResult(EditOutcome.RETURN_TO_MENU, alias)

    launcher = Recorder()
    ctx = make_ctx(
        tmp_path,
        make_store(tmp_path),
        launcher,
        input_fn=scripted("e1", "e9", "1"),
        editor=fake_editor,
    )
    assert run_selection(ctx) == 0
    assert edited == ["alpha"]
    assert launcher.calls[0]["ANTHROPIC_AUTH_TOKEN"] == "tok-a"


def test_config_mode_conflict_does_not_launch(tmp_path, capsys):
    launcher = Recorder()
    ctx = make_ctx(
        tmp_path,
        make_store(tmp_path, WriteMode.CONFIG),
        launcher,
        input_fn=scripted("1"),
        environ={"ANTHROPIC_AUTH_TOKEN": "exported"},
    )
    assert run_selection(ctx) == 1
    assert launcher.calls == []
    out = capsys.readouterr().out
    assert "ANTHROPIC_AUTH_TOKEN (exported in the current shell)" in out


def test_config_mode_writes_settings_and_launches_plain(tmp_path):
    launcher = Recorder()
    ctx = make_ctx(
        tmp_path, make_store(tmp_path, WriteMode.CONFIG), launcher, input_fn=scripted("1")
    )
    assert run_selection(ctx) == 0
    assert launcher.calls == [None]
    assert settings_env(tmp_path) == {
        "ANTHROPIC_AUTH_TOKEN": "tok-a",
        "ANTHROPIC_BASE_URL": "https://a",
    }


def test_mode_override_beats_store_default(tmp_path):
    launcher = Recorder()
    ctx = make_ctx(
        tmp_path,
        make_store(tmp_path, WriteMode.CONFIG),
        launcher,
        input_fn=scripted("1"),
        mode_override=WriteMode.ENV,
        environ={"ANTHROPIC_AUTH_TOKEN": "exported"},
    )
    assert run_selection(ctx) == 0
    assert launcher.calls[0]["ANTHROPIC_AUTH_TOKEN"] == "tok-a"


def test_main_menu_line_paths(tmp_path, capsys):
    launcher = Recorder()
    store = make_store(tmp_path)
    ctx = make_ctx(tmp_path, store, launcher, input_fn=scripted("1"))
    assert run_main_menu(ctx) == 0
    assert launcher.calls == [None]

    ctx = make_ctx(tmp_path, store, launcher, input_fn=scripted("2", None, "9", "3"))
    assert run_main_menu(ctx) == 0
    out = capsys.readouterr().out
    assert "Back to main menu" in out
    assert "Invalid choice." in out
    assert len(launcher.calls) == 1

    ctx = make_ctx(tmp_path, store, launcher, input_fn=scripted())
    assert run_main_menu(ctx) == 0


def test_interactive_selection_releases_terminal_before_launch(tmp_path):
    events = []
    launcher = Recorder(events)
    term = FakeTerm(["DOWN", "DOWN", "UP", "ENTER"], events)
    ctx = make_ctx(tmp_path, make_store(tmp_path), launcher, session_factory=lambda: term)
    assert run_selection(ctx) == 0
    assert events == ["acquire", "release", "launch"]
    assert launcher.calls[0]["ANTHROPIC_AUTH_TOKEN"] == "tok-a"
    assert any("▶ [1] alpha" in line for line in term.frames[-1])


def test_interactive_edit_runs_with_terminal_suspended(tmp_path):
    events = []
    seen_active = []
    term = FakeTerm(["DOWN", "e", "q"], events)

    def fake_editor(store, alias, caps=None, input_fn=None):
        seen_active.append(term.active)
        events.append(f"edit:{alias}")
        return EditResult(EditOutcome.SAVED, alias)

    ctx = make_ctx(
        tmp_path,
        make_store(tmp_path),
        Recorder(events),
        session_factory=lambda: term,
        editor=fake_editor,
    )
    assert run_selection(ctx) == 0
    assert events == ["acquire", "suspend", "edit:alpha", "resume", "release"]
    assert seen_active == [False]


def test_interactive_escape_cancels(tmp_path):
    events = []
    term = FakeTerm(["ESC"], events)
    ctx = make_ctx(tmp_path, make_store(tmp_path), Recorder(events), session_factory=lambda: term)
    assert run_selection(ctx) is None
    assert events == ["acquire", "release"]


def test_ctrl_c_restores_terminal(tmp_path):
    events = []
    term = FakeTerm(["CTRL_C"], events)
    ctx = make_ctx(tmp_path, make_store(tmp_path), Recorder(events), session_factory=lambda: term)
    with pytest.raises(KeyboardInterrupt):
        run_selection(ctx)
    assert events == ["acquire", "release"]


def test_interactive_main_menu_into_selection(tmp_path):
    events = []
    terms = iter([FakeTerm(["DOWN", "ENTER"], events), FakeTerm(["r"], events)])
    launcher = Recorder(events)
    ctx = make_ctx(tmp_path, make_store(tmp_path), launcher, session_factory=lambda: next(terms))
    assert run_main_menu(ctx) == 0
    assert events == ["acquire", "release", "acquire", "release", "launch"]
    assert launcher.calls == [{}]


def test_rename_in_editor_keeps_cursor_on_renamed_profile(tmp_path):
    events = []
    store = make_store(tmp_path)
    store.add(Profile("gamma", "tok-g", "https://g"))
    store.save()
    # cursor on beta, edit it, rename to zeta, save, then commit
    term = FakeTerm(["DOWN", "DOWN", "e", "ENTER"], events)
    launcher = Recorder(events)
    ctx = make_ctx(
        tmp_path,
        store,
        launcher,
        session_factory=lambda: term,
        input_fn=scripted("1", "zeta", "S"),
    )
    assert run_selection(ctx) == 0
    assert store.aliases() == ["alpha", "gamma", "zeta"]
    assert launcher.calls == [
        {"ANTHROPIC_AUTH_TOKEN": "t", "ANTHROPIC_BASE_URL": "u",
         "ANTHROPIC_SMALL_FAST_MODEL": "x"}
    ]


def test_line_fallback_edit_follows_renamed_profile(tmp_path):
    store = make_store(tmp_path)
    store.add(Profile("gamma", "tok-g", "https://g"))
    store.save()
    edited = []

    def recording_editor(store, alias, **kw):
        edited.append(alias)
        return edit_profile(store, alias, **kw)

    ctx = make_ctx(
        tmp_path,
        store,
        Recorder(),
        input_fn=scripted("e1", "1", "omega", "S", "e", "Q", "q"),
        editor=recording_editor,
    )
    assert run_selection(ctx) == 0
    assert store.aliases() == ["beta", "gamma", "omega"]
    assert edited == ["alpha", "omega"]
