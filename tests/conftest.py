"""Pytest configuration and fixtures."""

import logging

import pytest


@pytest.fixture(autouse=True)
def cleanup_loggers():
    """Clean up run loggers after each test to prevent name collisions."""
    yield

    # Remove loggers created by setup_logger; module loggers stay registered
    loggers_to_remove = [
        name
        for name in logging.Logger.manager.loggerDict.keys()
        if name.startswith("codegrade_")
    ]

    for name in loggers_to_remove:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()
        del logging.Logger.manager.loggerDict[name]


@pytest.fixture
def pyramid_loop_code():
    """Python pyramid solution that builds every row in a loop."""
    return (
        "# Print a pyramid of stars\n"
        "def pyramid(n):\n"
        "    for i in range(1, n + 1):\n"
        "        print(' ' * (n - i) + '*' * (2 * i - 1))\n"
        "\n"
        "n = int(input())\n"
        "pyramid(n)\n"
    )


@pytest.fixture
def pyramid_dump_code():
    """C++ pyramid 'solution' that prints each row as a literal."""
    return (
        "#include <iostream>\n"
        "using namespace std;\n"
        "int main() {\n"
        '    cout << "    *" << endl;\n'
        '    cout << "   ***" << endl;\n'
        '    cout << "  *****" << endl;\n'
        '    cout << " *******" << endl;\n'
        '    cout << "*********" << endl;\n'
        "    return 0;\n"
        "}\n"
    )
