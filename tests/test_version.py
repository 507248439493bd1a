def test_version():
    """Test that version is defined."""
    from feedgrab import __version__
    assert __version__ == "0.1.0"
