"""Noxfile for the firehose destinations project.

Provides automated sessions for:
- Testing with coverage
- Linting
- Type checking
- Security scanning
- Template synthesis
"""

import nox

# Python versions to test against
PYTHON_VERSIONS = ["3.11"]

# Common locations
PACKAGE_DIR = "firehosedestinations"
INFRA_DIR = "infra"
CONFIG_DIR = "config"


@nox.session(python=PYTHON_VERSIONS)
def tests(session):
    """Run the test suite with coverage."""
    session.install(".[test]")

    session.run(
        "pytest",
        "--cov=" + PACKAGE_DIR,
        "--cov-report=term-missing",
        "--cov-fail-under=80",
        *session.posargs,
    )


@nox.session(python=PYTHON_VERSIONS)
def lint(session):
    """Run linting with ruff."""
    session.install("ruff")
    session.run("ruff", "check", PACKAGE_DIR, INFRA_DIR, "tests")


@nox.session(python=PYTHON_VERSIONS)
def typecheck(session):
    """Run type checking with mypy."""
    session.install(".")
    session.install("mypy", "types-PyYAML")
    session.run("mypy", PACKAGE_DIR, INFRA_DIR)


@nox.session(python=PYTHON_VERSIONS)
def security(session):
    """Run bandit over the construct library and CDK app."""
    session.install("bandit[toml]")
    session.run("bandit", "-c", "pyproject.toml", "-r", PACKAGE_DIR, INFRA_DIR)


@nox.session(python=PYTHON_VERSIONS)
def synth(session):
    """Synthesize a template without deploying (defaults to the dev environment)."""
    session.install(".")
    env = session.posargs[0] if session.posargs else "dev"
    session.run(
        "firehose-destinations",
        "--env", env,
        "--config-dir", CONFIG_DIR,
        "--output", f"template.{env}.json",
    )


# Default session when running `nox` without arguments
nox.options.sessions = ["tests", "lint", "typecheck"]
