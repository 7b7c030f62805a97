def test_imports():
    """
    @brief
    Verifies that all core Alchemist modules are importable.

    @details
    Ensures package structure integrity and confirms that
    alchemist, alchemist.dataloader, alchemist.validator and
    alchemist.export are accessible without import errors.
    """
    import alchemist
    import alchemist.dataloader
    import alchemist.export
    import alchemist.validator

    # --- Assert ---
    assert all([alchemist, alchemist.dataloader, alchemist.export, alchemist.validator])
