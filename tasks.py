# type: ignore
import os

from invoke import task


@task
def venv(ctx):
    """Create .venv with uv and install the package with test and dev extras."""
    print("Initializing development environment with uv...")
    ctx.run("uv venv")
    ctx.run("uv pip install -e '.[test,dev]'")
    print("Development environment initialization complete!")


@task
def clean(ctx):
    """
    Remove untracked files and directories, after listing them and asking.
    """

    ctx.run("git clean -nfdx")

    response = (
        input("Are you sure you want to remove all untracked files? (y/n) [n]: ")
        .strip()
        .lower()
    )
    if response == "y":
        ctx.run("git clean -fdx")


@task
def lint(ctx):
    """
    Run ruff over sources and tests, then mypy over sources.
    """
    ctx.run("ruff check src tests", pty=True)
    ctx.run("ruff format --check src tests", pty=True)
    ctx.run("mypy src", pty=True)


@task
def test(ctx):
    """
    Run tests with coverage information.
    """
    ctx.run("pytest --cov=alexa_entities --cov-report=term-missing", pty=True)


@task
def mock_hub(ctx, port=8765, token="test-token"):
    """Serve the fake Home Assistant WebSocket API on localhost."""
    ctx.run(f"alexa-entities mock-hub --port {port} --token {token}", pty=True)


@task
def build_package(ctx):
    """
    Build sdist and wheel into dist/.
    """

    ctx.run("rm -rf dist")
    ctx.run("uv build")


@task
def release(ctx):
    """Build the package and publish it to PyPI using uv."""
    token = os.getenv("PYPI_TOKEN")
    if not token:
        raise ValueError("PYPI_TOKEN environment variable is not set")

    print("Building package...")
    ctx.run("invoke build-package")

    print("Publishing to PyPI...")
    ctx.run(f"uv publish --token {token}")
