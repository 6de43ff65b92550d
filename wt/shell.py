from __future__ import annotations

from wt.errors import UnsupportedShellError

CD_SENTINEL = "__wt_cd:"
SUPPORTED_SHELLS = ("bash", "zsh", "fish")

BASH_ZSH_FUNCTION = """\
wt() {
  local output
  output=$(command wt "$@")
  local exit_code=$?
  if [[ "$output" == __wt_cd:* ]]; then
    cd "${output#__wt_cd:}"
  elif [[ -n "$output" ]]; then
    echo "$output"
  fi
  return $exit_code
}
"""

FISH_FUNCTION = """\
function wt
  set -l output (command wt $argv)
  set -l exit_code $status
  if string match -q '__wt_cd:*' $output
    cd (string replace '__wt_cd:' '' $output)
  else if test -n "$output"
    printf '%s\\n' $output
  end
  return $exit_code
end
"""


def shell_function(shell: str) -> str:
    """Wrapper function that lets ``wt`` change the calling shell's directory."""
    if shell in {"bash", "zsh"}:
        return BASH_ZSH_FUNCTION
    if shell == "fish":
        return FISH_FUNCTION
    raise UnsupportedShellError(shell)
