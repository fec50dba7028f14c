import pytest


@pytest.fixture(autouse=True)
def isolate_user_config(tmp_path, monkeypatch):
    """Keep the user's git-release configuration and token out of the tests.

    The configuration directory is pointed at an empty temporary directory
    and ``GITHUB_TOKEN`` is removed for the duration of each test.
    """
    monkeypatch.setattr(
        "vc_release_notes.config.loader._get_config_directory",
        lambda: tmp_path / "git_release_config",
    )
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    yield
