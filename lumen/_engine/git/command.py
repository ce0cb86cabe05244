import logging
import subprocess
from typing import List, Tuple

logger = logging.getLogger(__name__)


def run_git_command(command: List[str], strip: bool = True) -> Tuple[int, str, str]:
    """
    Runs a git command and returns its return code, stdout, and stderr.

    Args:
        command (List[str]): The git command and its arguments as a list of strings.
                             Example: ["git", "rev-parse", "HEAD"]
        strip (bool): Strip surrounding whitespace from stdout. Pass False for
                      patch output, which must reach the caller byte for byte
                      (trailing blank context lines, CRLF endings).

    Returns:
        Tuple[int, str, str]: A tuple containing the command's return code,
                              stdout (decoded string), and stderr (decoded string).
                              Returns (1, "", "<reason>") if git cannot be executed.
    """
    logger.debug("running %s", " ".join(command))
    try:
        # Decoded by hand: text mode would translate line endings
        result = subprocess.run(command, capture_output=True, check=False)
    except FileNotFoundError:
        return 1, "", "Git command not found. Is Git installed and in your PATH?"
    except OSError as e:
        return 1, "", f"Exception running command {' '.join(command)}: {e}"

    # errors="replace" keeps binary hunks from aborting the decode
    stdout = result.stdout.decode("utf-8", errors="replace")
    stderr = result.stderr.decode("utf-8", errors="replace").strip()
    if result.returncode != 0:
        logger.debug("git exited %d: %s", result.returncode, stderr)
    return result.returncode, stdout.strip() if strip else stdout, stderr
