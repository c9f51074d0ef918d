from blazeqb.query import placeholders


def test_bare_placeholder_follows_largest_index():
    assert placeholders.resolve_indexes("a = ?2 AND b = ? AND c = ?1 AND d = ?") == [2, 3, 1, 4]


def test_quoted_literals_are_skipped():
    sql = "note = 'is it ?' AND x = ? AND y = 'it''s ?3'"
    assert placeholders.resolve_indexes(sql) == [1]
    assert placeholders.highest_index(sql) == 1


def test_indexes_continue_after_preceding_arguments():
    assert placeholders.resolve_indexes("x = ? AND y = ?3", start=1) == [2, 3]
    assert placeholders.highest_index("x = ?1", start=2) == 2
    assert placeholders.highest_index("", start=2) == 2


def test_number_bare_rewrites_without_changing_binding():
    sql = "a = ? AND b = ?1 AND c = ?"
    assert placeholders.number_bare(sql) == "a = ?1 AND b = ?1 AND c = ?2"
    assert placeholders.number_bare("a = ?3") == "a = ?3"


def test_offsets_are_prefix_sums():
    assert placeholders.offsets(2, 3, 1) == [0, 2, 5]
    assert placeholders.offsets(0, 1, 2) == [0, 0, 1]
    assert placeholders.offsets() == []
