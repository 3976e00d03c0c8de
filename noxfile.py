"""Installs ziplog, prints help text, and runs the tests with Python 3.9 - 3.13

Use this file with the `nox` tool to run ziplog with all specified versions
of Python. For more information, see: https://nox.thea.codes/en/stable/
"""
import nox

@nox.session(python=["3.9", "3.10", "3.11", "3.12", "3.13"])
def smoke_test(session):
    session.install(".")
    session.run("ziplog", "-h")


@nox.session(python=["3.9", "3.10", "3.11", "3.12", "3.13"])
def tests(session):
    session.install(".[test]")
    session.run("pytest")
