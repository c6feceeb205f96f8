from miniftpd.entities.command import Command


def test_verb_is_case_insensitive():
    cmd = Command("retr f.txt\r\n")
    assert cmd.get_name() == "RETR"
    assert cmd.get_argument() == "f.txt"


def test_argument_keeps_spaces_after_first_separator():
    cmd = Command("RETR my file.txt")
    assert cmd.get_argument() == "my file.txt"


def test_blank_argument_is_absent():
    assert Command("LIST").get_argument() is None
    assert Command("CWD    ").get_argument() is None
    assert not Command("PASV ").has_argument()


def test_split_args_for_type():
    cmd = Command("TYPE a n")
    assert cmd.get_args() == ["a", "n"]
    assert cmd.get_arg(1) == "n"
    assert cmd.get_arg(2) is None


def test_password_is_masked_in_str():
    assert "hunter2" not in str(Command("PASS hunter2"))
    assert "f.txt" in str(Command("RETR f.txt"))
