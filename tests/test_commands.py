import pytest

from cliadventures import markup
from cliadventures.commands import (
    COMMANDS,
    GOODBYE_MESSAGE,
    RELICS_DESCRIPTION,
    dispatch,
    parse_command,
    render_error,
    suggest_command,
)
from cliadventures.errors import (
    KindMismatchError,
    NotFoundError,
    PreconditionError,
    UnknownCommandError,
    UsageError,
)
from cliadventures.service import GameSession


def _run(session: GameSession, line: str) -> str:
    verb, args = parse_command(line)
    return markup.strip(dispatch(session, verb, args))


def _extracted(session: GameSession, relics: bool = False) -> str:
    archive = session.world.extract_archive()
    if relics:
        session.world.add_directory(archive.key, "relics")
    return archive.key


def test_parse_command_lowercases_verb_only() -> None:
    assert parse_command("  LS  ") == ("ls", [])
    assert parse_command("Cat Notes.TXT") == ("cat", ["Notes.TXT"])
    assert parse_command('touch "my file.txt"') == ("touch", ["my file.txt"])


def test_parse_command_rejects_unbalanced_quotes() -> None:
    with pytest.raises(UsageError, match="Unbalanced quotes"):
        parse_command('cat "notes.txt')


def test_suggest_command_matches_legacy_heuristic() -> None:
    assert suggest_command("lss") == "ls"
    assert suggest_command("claer") == "clear"
    assert suggest_command("x") is None
    assert suggest_command("xyz") is None
    assert suggest_command("ls") is None


def test_unknown_verbs(session: GameSession) -> None:
    with pytest.raises(UnknownCommandError, match="Did you mean 'ls'"):
        _run(session, "lss")
    with pytest.raises(UnknownCommandError, match="Type 'help' for a list of valid commands"):
        _run(session, "xyz")
    with pytest.raises(KindMismatchError, match="type 'cat notes.txt' instead"):
        _run(session, "notes.txt")


def test_help_lists_every_command(session: GameSession) -> None:
    lines = _run(session, "help").splitlines()
    assert lines[0] == "Available commands:"
    assert lines[1] == "- help: Show this help message"
    assert len(lines) == len(COMMANDS) + 1
    assert "- mv [source] [destination]: Move or rename a file" in lines


def test_help_for_single_verb(session: GameSession) -> None:
    assert _run(session, "help unzip") == "unzip [file.zip]: Extract contents of a zip file"
    with pytest.raises(NotFoundError):
        _run(session, "help dance")
    with pytest.raises(UsageError, match="Too many arguments"):
        _run(session, "help ls cd")


def test_ls_lists_files_then_child_directories(session: GameSession) -> None:
    assert _run(session, "ls") == "notes.txt mission.txt documents downloads projects"
    raw = dispatch(session, "ls", [])
    assert markup.directory("documents") in raw

    session.location = "projects"
    assert _run(session, "ls") == "README.md hidden_vault"
    session.location = "hidden_vault"
    assert _run(session, "ls") == "treasure.json"


def test_ls_with_argument_errors(session: GameSession) -> None:
    with pytest.raises(UsageError, match="first use 'cd documents', then 'ls'"):
        _run(session, "ls documents")
    with pytest.raises(KindMismatchError):
        _run(session, "ls notes.txt")
    with pytest.raises(PreconditionError, match="Cannot access 'hidden_vault' from current location"):
        _run(session, "ls hidden_vault")
    with pytest.raises(NotFoundError, match="No such directory: 'nowhere'"):
        _run(session, "ls nowhere")


def test_cd_single_steps(session: GameSession) -> None:
    assert _run(session, "cd documents") == "Changed directory to documents"
    assert session.location == "documents"
    assert _run(session, "cd ..") == "Changed directory to home"
    with pytest.raises(PreconditionError, match="Already at the root"):
        _run(session, "cd ..")
    assert _run(session, "cd projects") == "Changed directory to projects"
    assert _run(session, "cd ~") == "Changed directory to home"


def test_cd_rejections(session: GameSession) -> None:
    with pytest.raises(KindMismatchError, match="is a file"):
        _run(session, "cd notes.txt")
    with pytest.raises(NotFoundError, match="Check your spelling"):
        _run(session, "cd nowhere")

    session.location = "documents"
    with pytest.raises(PreconditionError, match="No direct path to 'downloads'"):
        _run(session, "cd downloads")
    with pytest.raises(PreconditionError, match="Use 'cd ~' instead"):
        _run(session, "cd home")

    session.location = "hidden_vault"
    with pytest.raises(PreconditionError, match="parent directory 'projects' from 'hidden_vault'"):
        _run(session, "cd projects")
    assert session.location == "hidden_vault"


def test_cd_without_argument_goes_home(session: GameSession) -> None:
    session.location = "hidden_vault"
    assert _run(session, "cd") == "Changed directory to home"
    assert session.location == "home"


def test_cd_compound_paths(session: GameSession) -> None:
    assert _run(session, "cd projects/hidden_vault") == "Changed directory to projects/hidden_vault"
    assert session.location == "hidden_vault"
    assert _run(session, "cd ../..") == "Changed directory to ../.."
    assert session.location == "home"

    session.location = "documents"
    assert _run(session, "cd /downloads/") == "Changed directory to /downloads/"
    assert session.location == "downloads"


def test_cd_compound_path_is_atomic(session: GameSession) -> None:
    with pytest.raises(NotFoundError, match="Directory 'nowhere' not found in the path projects/nowhere."):
        _run(session, "cd projects/nowhere")
    assert session.location == "home"


def test_cat(session: GameSession) -> None:
    assert _run(session, "cat notes.txt").startswith("Welcome to CLI Adventures!")
    with pytest.raises(KindMismatchError, match="is a directory"):
        _run(session, "cat documents")
    with pytest.raises(NotFoundError, match="File 'secret.txt' does not exist here"):
        _run(session, "cat secret.txt")
    with pytest.raises(UsageError, match=r"Specify a file to view its contents\. Usage: 'cat \[file\]'\."):
        _run(session, "cat")

    session.location = "documents"
    with pytest.raises(NotFoundError, match="Cannot display contents of 'manual.pdf'"):
        _run(session, "cat manual.pdf")


def test_pwd(session: GameSession) -> None:
    assert _run(session, "pwd") == "~"
    session.location = "hidden_vault"
    assert _run(session, "pwd") == "/hidden_vault"
    with pytest.raises(UsageError):
        _run(session, "pwd -L")


def test_mkdir(session: GameSession) -> None:
    assert _run(session, "mkdir tmp") == "Created directory: tmp"
    assert _run(session, "ls").endswith("projects tmp")
    assert session.world.child("home", "tmp").description == "A directory you created named tmp."
    with pytest.raises(PreconditionError, match="already exists"):
        _run(session, "mkdir documents")
    with pytest.raises(KindMismatchError, match="A file with that name already exists"):
        _run(session, "mkdir notes.txt")
    with pytest.raises(UsageError):
        _run(session, "mkdir a/b")
    with pytest.raises(UsageError, match="reserved"):
        _run(session, "mkdir ..")


def test_mkdir_relics_inside_archive(session: GameSession) -> None:
    session.location = _extracted(session)
    result = _run(session, "mkdir relics")
    assert result.startswith("Created directory: relics")
    assert "Now you can move the treasure.json" in result
    assert session.world.child(session.location, "relics").description == RELICS_DESCRIPTION

    session.location = "home"
    assert _run(session, "mkdir relics") == "Created directory: relics"


def test_touch(session: GameSession) -> None:
    assert _run(session, "touch new.txt") == "Created file: new.txt"
    assert session.world["home"].items[-1] == "new.txt"
    assert _run(session, "cat new.txt") == ""
    assert _run(session, "touch notes.txt") == "Updated timestamp of notes.txt"
    assert session.world["home"].items.count("notes.txt") == 1
    with pytest.raises(KindMismatchError):
        _run(session, "touch documents")


def test_rm(session: GameSession) -> None:
    assert _run(session, "rm notes.txt") == "Removed: notes.txt"
    assert "notes.txt" not in session.world["home"].items
    assert "notes.txt" not in session.world.files
    with pytest.raises(KindMismatchError, match="do not allow directory removal"):
        _run(session, "rm documents")
    with pytest.raises(NotFoundError, match="File does not exist"):
        _run(session, "rm ghost.txt")


def test_rm_protected_file_warns_first(session: GameSession) -> None:
    result = _run(session, "rm mission.txt")
    assert result.startswith("Warning: You're attempting to remove a crucial file 'mission.txt'.")
    assert "mission.txt" in session.world["home"].items


def test_mv_renames_within_directory(session: GameSession) -> None:
    assert _run(session, "mv notes.txt todo.txt") == "Moved notes.txt to todo.txt"
    assert session.world["home"].items == ["mission.txt", "todo.txt"]
    with pytest.raises(UsageError, match="into itself"):
        _run(session, "mv todo.txt todo.txt")
    with pytest.raises(NotFoundError):
        _run(session, "mv ghost.txt x")
    with pytest.raises(KindMismatchError):
        _run(session, "mv documents x")


def test_mv_refuses_cross_directory_moves(session: GameSession) -> None:
    for destination in ("documents", "~/notes.txt", "..", "documents/notes.txt"):
        with pytest.raises(PreconditionError, match="between directories"):
            _run(session, f"mv notes.txt {destination}")
    assert "notes.txt" in session.world["home"].items


def test_mv_path_sources(session: GameSession) -> None:
    with pytest.raises(PreconditionError) as caught:
        _run(session, "mv projects/hidden_vault/treasure.json archive")
    assert "cd projects" in (caught.value.hint or "")
    with pytest.raises(PreconditionError, match="navigate to the directory containing the file"):
        _run(session, "mv documents/secret.txt x")
    with pytest.raises(NotFoundError):
        _run(session, "mv somewhere/else.txt x")


def test_mission_move_requires_archive_then_relics(session: GameSession) -> None:
    session.location = "hidden_vault"
    with pytest.raises(PreconditionError, match="Destination 'archive' not found"):
        _run(session, "mv treasure.json archive/relics")

    archive_key = _extracted(session)
    with pytest.raises(PreconditionError, match="Cannot move to 'relics'"):
        _run(session, "mv treasure.json archive/relics")
    assert session.mission_complete is False

    relics = session.world.add_directory(archive_key, "relics")
    result = _run(session, "mv treasure.json archive/relics/treasure.json")
    assert result.startswith("🎉 MISSION ACCOMPLISHED! 🎉")
    assert session.mission_complete is True
    assert session.world["hidden_vault"].items == []
    assert relics.items == ["treasure.json"]


def test_cp(session: GameSession) -> None:
    assert _run(session, "cp notes.txt copy.txt") == "Copied notes.txt to copy.txt"
    assert session.world.files["copy.txt"] == session.world.files["notes.txt"]
    assert _run(session, "cp notes.txt notes.txt") == "Copied notes.txt to notes.txt"
    assert session.world["home"].items.count("notes.txt") == 1
    with pytest.raises(PreconditionError):
        _run(session, "cp notes.txt documents")
    with pytest.raises(UsageError, match=r"Missing arguments\. Usage: 'cp \[source\] \[destination\]'\."):
        _run(session, "cp notes.txt")


def test_unzip(session: GameSession) -> None:
    session.location = "downloads"
    assert _run(session, "unzip archive.zip") == (
        "Archive extracted successfully. You can now access the 'archive' directory."
    )
    assert _run(session, "ls") == "image.jpg archive.zip archive"
    again = _run(session, "unzip archive.zip")
    assert again.startswith("Warning: Archive already extracted.")
    assert session.world["downloads"].exits.count("archive") == 1


def test_unzip_rejections(session: GameSession) -> None:
    with pytest.raises(UsageError, match="is not a zip file"):
        _run(session, "unzip notes.txt")
    with pytest.raises(KindMismatchError):
        _run(session, "unzip documents")
    with pytest.raises(NotFoundError, match="Zip archive 'ghost.zip' not found"):
        _run(session, "unzip ghost.zip")
    _run(session, "touch other.zip")
    with pytest.raises(PreconditionError, match="not a valid zip archive"):
        _run(session, "unzip other.zip")


def test_unzip_refuses_when_directory_name_taken(session: GameSession) -> None:
    session.location = "downloads"
    _run(session, "mkdir archive")
    with pytest.raises(PreconditionError, match="already exists here"):
        _run(session, "unzip archive.zip")
    assert session.world.archive is None


def test_clear_reset_and_exit(session: GameSession) -> None:
    assert dispatch(session, "clear", []) == markup.CLEAR_SCREEN
    session.location = "projects"
    session.world.add_file("projects", "x.txt")
    reset = dispatch(session, "reset", [])
    assert reset.startswith(markup.CLEAR_SCREEN)
    assert "=== Game Reset ===" in reset
    assert session.location == "home"
    assert "x.txt" not in session.world["projects"].items
    assert _run(session, "exit") == GOODBYE_MESSAGE


def test_render_error_appends_hint() -> None:
    plain = render_error(NotFoundError("gone"))
    assert plain == markup.error("Error: gone")
    hinted = markup.strip(render_error(UsageError("bad", hint="try again")))
    assert hinted == "Error: bad\n\nHint: try again"
