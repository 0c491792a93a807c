"""Nox sessions for testing folder-sizer across interpreters and checking quality."""

import nox

PYTHON_VERSIONS = ["3.12", "3.13", "3.14"]
LATEST = PYTHON_VERSIONS[-1]


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run the unit suite with coverage reporting.

    Args:
        session: The nox session object.
    """
    session.run("uv", "sync", external=True)
    session.run(
        "pytest",
        "tests/unit",
        "--cov=folder_sizer",
        "--cov-report=term-missing:skip-covered",
        "--cov-fail-under=80",
        *session.posargs,
    )


@nox.session(python=LATEST)
def properties(session: nox.Session) -> None:
    """Run the Hypothesis ranking and progress properties."""
    session.run("uv", "sync", external=True)
    session.run("pytest", "tests/property", "-p", "no:cacheprovider", *session.posargs)


@nox.session(python=LATEST)
def lint(session: nox.Session) -> None:
    """Run ruff linting and formatting checks."""
    session.run("uv", "sync", external=True)
    session.run("ruff", "check", "src", "tests", "noxfile.py")
    session.run("ruff", "format", "--check", "src", "tests", "noxfile.py")


@nox.session(python=LATEST)
def typecheck(session: nox.Session) -> None:
    """Run basedpyright over the package sources."""
    session.run("uv", "sync", external=True)
    session.run("uvx", "basedpyright@latest", "src", external=True)


@nox.session(python=LATEST)
def smoke(session: nox.Session) -> None:
    """Scan the checkout itself through the installed console script."""
    session.run("uv", "sync", external=True)
    session.run("folder-sizer", ".", "--top", "5", "--quiet")
