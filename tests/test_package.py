"""Basic package tests for nono-analyzer."""


def test_package_imports() -> None:
    """Test that the main package can be imported."""
    import nono_analyzer

    assert nono_analyzer.__version__ == "0.1.0"


def test_cli_imports() -> None:
    """Test that the CLI module can be imported."""
    from nono_analyzer.cli import main

    assert main is not None


def test_subpackages_import() -> None:
    """Test that all subpackages can be imported."""
    import nono_analyzer.analysis
    import nono_analyzer.config
    import nono_analyzer.models
    import nono_analyzer.output
    import nono_analyzer.resolvers
    import nono_analyzer.verify

    assert nono_analyzer.models is not None
    assert nono_analyzer.resolvers is not None
    assert nono_analyzer.analysis is not None
    assert nono_analyzer.verify is not None
    assert nono_analyzer.output is not None
    assert nono_analyzer.config is not None
