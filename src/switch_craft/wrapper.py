"""
switch-craft shell integration

The CLI can only print commands; these wrapper functions make the calling
shell evaluate them. ``switch-craft init <shell>`` prints the block for the
user's profile.
"""

from .shells import Dialect


_FUNCTIONS = {
    Dialect.SH: '''
# switch-craft shell integration (bash/zsh)
sc() { eval "$(command switch-craft go sh "$@")"; }
scx() { eval "$(command switch-craft select sh "$@")"; }
scc() { eval "$(command switch-craft reset sh)"; }
alias scl="switch-craft list"
''',
    Dialect.FISH: '''
# switch-craft shell integration (fish)
function sc; command switch-craft go fish $argv | source; end
function scx; command switch-craft select fish $argv | source; end
function scc; command switch-craft reset fish | source; end
alias scl="switch-craft list"
''',
    Dialect.PWSH: '''
# switch-craft shell integration (PowerShell)
function sc { $s = & switch-craft go pwsh @args; if ($LASTEXITCODE -eq 0) { Invoke-Expression ($s -join "`n") } }
function scx { $s = & switch-craft select pwsh @args; if ($LASTEXITCODE -eq 0) { Invoke-Expression ($s -join "`n") } }
function scc { Invoke-Expression ((& switch-craft reset pwsh) -join "`n") }
function scl { & switch-craft list }
''',
}


def generate_shell_function(dialect: Dialect) -> str:
    """Shell functions wrapping switch-craft for ``dialect``."""
    return _FUNCTIONS[dialect].strip()
