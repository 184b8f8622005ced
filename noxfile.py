import os

import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13"]

# Rebuilt per interpreter; a cached wheel may carry a .so for another Python.
_C_EXT_PACKAGES = ["psycopg2-binary"]


def _install(session: nox.Session) -> None:
    """Install stockflow with its test extra into the nox virtualenv."""
    session.run("poetry", "install", "--all-extras", external=True)
    session.run("pip", "install", "--force-reinstall", "--no-cache-dir", *_C_EXT_PACKAGES)


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run the full suite."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Aggregate behaviour only, no locks or command processing."""
    _install(session)
    session.run("pytest", "tests/domain/", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests_engine(session: nox.Session) -> None:
    """Transition engine, concurrency and the feature scenarios."""
    _install(session)
    session.run("pytest", "tests/application/", "tests/bdd/", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
def loadtest(session: nox.Session) -> None:
    """Race buyers for scarce stock against a running API (STOCKFLOW_HOST)."""
    _install(session)
    host = os.environ.get("STOCKFLOW_HOST", "http://localhost:8000")
    session.run(
        "locust",
        "-f",
        "loadtests/locustfile.py",
        "ScarceStockUser",
        "--headless",
        "-u",
        "30",
        "-r",
        "10",
        "-t",
        "60s",
        "--host",
        host,
    )
