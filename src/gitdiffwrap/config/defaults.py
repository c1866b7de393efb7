"""Starter .gitdiffwrap.toml template."""

DEFAULT_TOML = """\
# gitdiffwrap configuration
version = "1.0"

[tool]
name = "windiff"            # profile id (windiff, meld, kdiff3, bcompare, ...) or executable
# args = "-i $F"            # $1 = left dir, $2 = right dir, $F = list file, $$ = $
# profiles_dir = ".gitdiffwrap-tools"

[git]
executable = "git"
# timeout = 300             # seconds per git process

[run]
untracked = true            # show untracked files when comparing the working copy
# temp = "$TMPDIR"          # where staging directories are created
keep_temp = false

[log]
level = "info"              # debug | info | warning
"""
