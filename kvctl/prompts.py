"""
Interactive confirmation for destructive commands.
"""

from kvctl.exceptions import UserInputError

# "yes", "Yes", " no " etc. are truncated to their first letter.
_RESPONSE_LEN = 1
_YES = "y"
_NO = "n"


def interactive_delete(prompt):
    """Ask a single yes/no question. Returns True for yes, False for no.

    Reads one line only. Anything that does not start with "y" or "n" after
    whitespace removal raises UserInputError instead of asking again, so a
    non-interactive stdin cannot hang the command.
    """
    print(f"{prompt} [y/n]")
    try:
        response = input()
    except EOFError:
        response = ""
    response = "".join(response.split()).lower()[:_RESPONSE_LEN]
    if response == _YES:
        return True
    if response == _NO:
        return False
    raise UserInputError('[ERROR] Response must either be "y" for yes or "n" for no')
