from codearena.execution.languages import LANGUAGE_VERSIONS, is_supported, normalize_input


def test_supported_languages_have_versions():
    assert is_supported("python")
    assert is_supported("cpp")
    assert not is_supported("cobol")
    assert LANGUAGE_VERSIONS["java"] == "15.0.2"


def test_line_oriented_language_splits_space_separated_values():
    assert normalize_input("python", "1 2 3") == "1\n2\n3"
    assert normalize_input("javascript", " 4   5 \n6") == "4\n5\n6"


def test_other_languages_keep_lines_and_trim_them():
    assert normalize_input("cpp", "  1 2 3  \n 4 ") == "1 2 3\n4"
    assert normalize_input("java", "3\n10 20 30") == "3\n10 20 30"


def test_missing_input_becomes_empty_stdin():
    assert normalize_input("python", None) == ""
    assert normalize_input("c", "") == ""


def test_tab_separated_values_are_split_too():
    assert normalize_input("python", "1\t2") == "1\n2"
    assert normalize_input("ruby", "7 \t 8\n9") == "7\n8\n9"
    assert normalize_input("c", "1\t2") == "1\t2"
