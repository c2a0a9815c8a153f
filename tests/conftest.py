from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

try:
    from hypothesis import HealthCheck, settings
except ImportError:  # pragma: no cover - hypothesis is optional in some environments
    HealthCheck = None  # type: ignore[assignment]
    settings = None  # type: ignore[assignment]

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from temp_testdir.config import CONFIG_ENV_VAR, ROOT_ENV_VAR, ROOT_NAME_ENV_VAR  # noqa: E402


@pytest.fixture(autouse=True)
def _clean_tempdir_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # Overrides set in the developer's shell must not leak into assertions.
    for name in (ROOT_ENV_VAR, ROOT_NAME_ENV_VAR, CONFIG_ENV_VAR):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point default construction at a per-test base directory."""

    root = tmp_path / "roots"
    monkeypatch.setenv(ROOT_ENV_VAR, root.as_posix())
    return root


def pytest_configure(config: pytest.Config) -> None:
    """Declare pytest markers and configure Hypothesis defaults."""

    for marker, description in [
        ("integration", "Tests that exercise the full create/write/drop cycle on disk."),
        ("plugin", "Tests that run an inner pytest session through pytester."),
    ]:
        config.addinivalue_line("markers", f"{marker}: {description}")

    default_profile = _configure_hypothesis_profiles()
    if settings is None:
        return

    # --hypothesis-profile is registered by the Hypothesis pytest plugin.
    selected = config.getoption("hypothesis_profile", default=None)
    if selected:
        settings.load_profile(selected)
    elif os.getenv("CI"):
        settings.load_profile("ci")
    else:
        settings.load_profile(default_profile)


_HYPOTHESIS_PROFILES_REGISTERED = False


def _configure_hypothesis_profiles() -> str:
    """Register Hypothesis profiles and return the default profile name."""

    global _HYPOTHESIS_PROFILES_REGISTERED
    if settings is None:
        return "dev"

    if not _HYPOTHESIS_PROFILES_REGISTERED:
        suppress_checks = (HealthCheck.function_scoped_fixture,) if HealthCheck else ()
        settings.register_profile(
            "dev",
            settings(
                max_examples=25,
                deadline=500,
                suppress_health_check=suppress_checks,
            ),
        )
        settings.register_profile(
            "ci",
            settings(
                max_examples=75,
                deadline=750,
                print_blob=True,
                suppress_health_check=suppress_checks,
            ),
        )
        settings.register_profile(
            "stress",
            settings(
                max_examples=150,
                deadline=None,
                print_blob=True,
                suppress_health_check=suppress_checks,
            ),
        )
        _HYPOTHESIS_PROFILES_REGISTERED = True
    return "dev"
