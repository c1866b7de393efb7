"""Built-in tool profiles."""

from gitdiffwrap.tools.models import ToolProfile

WINDIFF = ToolProfile(
    id="windiff",
    program="windiff.exe",
    args="-i $F",
    description="WinDiff, fed with a list file.",
)

SDVDIFF = ToolProfile(
    id="sdvdiff",
    program="sdvdiff.exe",
    args="-i $F",
    description="sdvdiff, fed with a list file.",
)

MELD = ToolProfile(
    id="meld",
    program="meld",
    args="$1 $2",
    description="Meld directory comparison.",
)

KDIFF3 = ToolProfile(
    id="kdiff3",
    program="kdiff3",
    args="$1 $2",
    description="KDiff3 directory comparison.",
)

BCOMPARE = ToolProfile(
    id="bcompare",
    program="bcompare",
    args="$1 $2",
    description="Beyond Compare folder comparison.",
)

VIMDIFF = ToolProfile(
    id="vimdiff",
    program="vim",
    args="-c \"DirDiff $1 $2\"",
    description="Vim with the DirDiff plugin.",
)

VSCODE = ToolProfile(
    id="vscode",
    program="code",
    args="--new-window --wait $1 $2",
    description="Visual Studio Code, both staging directories in one window.",
)

OPENDIFF = ToolProfile(
    id="opendiff",
    program="opendiff",
    args="$1 $2",
    description="FileMerge on macOS.",
)

ALL_BUILTIN_TOOLS: list[ToolProfile] = [
    WINDIFF,
    SDVDIFF,
    MELD,
    KDIFF3,
    BCOMPARE,
    VIMDIFF,
    VSCODE,
    OPENDIFF,
]
