import os

from cua.env import load_env

VAR = "CUA_TEST_ENV_ALPHA"


def _deep_dir(base, depth):
    path = base
    for index in range(depth):
        path = path / f"level{index}"
    path.mkdir(parents=True)
    return path


def test_loads_env_from_current_directory(tmp_path, monkeypatch):
    monkeypatch.delenv(VAR, raising=False)
    (tmp_path / ".env").write_text(f"{VAR}=from_cwd\n")
    monkeypatch.chdir(tmp_path)
    loaded = load_env()
    assert loaded.resolve() == (tmp_path / ".env").resolve()
    assert os.environ[VAR] == "from_cwd"


def test_loads_env_from_parent_directory(tmp_path, monkeypatch):
    monkeypatch.delenv(VAR, raising=False)
    work = _deep_dir(tmp_path, 2)
    (tmp_path / "level0" / ".env").write_text(f"{VAR}=from_parent\n")
    monkeypatch.chdir(work)
    loaded = load_env()
    assert loaded.resolve() == (tmp_path / "level0" / ".env").resolve()
    assert os.environ[VAR] == "from_parent"


def test_ignores_env_beyond_three_parents(tmp_path, monkeypatch):
    monkeypatch.delenv(VAR, raising=False)
    work = _deep_dir(tmp_path, 6)
    (tmp_path / "level0" / ".env").write_text(f"{VAR}=too_far\n")
    monkeypatch.chdir(work)
    assert load_env() is None
    assert VAR not in os.environ


def test_current_directory_preferred_over_parent(tmp_path, monkeypatch):
    monkeypatch.delenv(VAR, raising=False)
    work = _deep_dir(tmp_path, 1)
    (tmp_path / ".env").write_text(f"{VAR}=parent\n")
    (work / ".env").write_text(f"{VAR}=child\n")
    monkeypatch.chdir(work)
    loaded = load_env()
    assert loaded.resolve() == (work / ".env").resolve()
    assert os.environ[VAR] == "child"


def test_existing_variables_not_overridden(tmp_path, monkeypatch):
    monkeypatch.setenv(VAR, "original")
    (tmp_path / ".env").write_text(f"{VAR}=replacement\n")
    monkeypatch.chdir(tmp_path)
    loaded = load_env()
    assert loaded.resolve() == (tmp_path / ".env").resolve()
    assert os.environ[VAR] == "original"


def test_directory_named_env_is_skipped(tmp_path, monkeypatch):
    monkeypatch.delenv(VAR, raising=False)
    work = _deep_dir(tmp_path, 1)
    (work / ".env").mkdir()
    (tmp_path / ".env").write_text(f"{VAR}=parent_file\n")
    monkeypatch.chdir(work)
    loaded = load_env()
    assert loaded.resolve() == (tmp_path / ".env").resolve()
    assert os.environ[VAR] == "parent_file"