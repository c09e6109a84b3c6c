from dupfinder.core.models import DuplicateKind, SortOrder

KIND_ALIASES = {
    "name": DuplicateKind.NAME,
    "content": DuplicateKind.CONTENT,
    "folder": DuplicateKind.FOLDER,
}

KIND_CHOICES = list(KIND_ALIASES.keys())

KIND_HELP_TEXT = (
    "Grouping passes to run (space separated). Default: all\n"
    "  name     : Same file name in different locations\n"
    "  content  : Byte-identical files (size → front hash → SHA-256)\n"
    "  folder   : Directories with identical structure and content\n"
    "Example    : %(prog)s ~/Projects --kinds content folder\n"
)

SORT_CHOICES = [order.value for order in SortOrder]

SORT_HELP_TEXT = (
    "Which file --keep-one preserves in each group:\n"
    "  shortest-path      : file closest to the root\n"
    "  shortest-filename  : file with the shortest name\n"
    "Default: shortest-path\n"
)

EPILOG_TEXT = """
Examples:
  Find every kind of duplicate in the current directory
  %(prog)s scan

  Only byte-identical files, at most 3 levels deep, including hidden entries
  %(prog)s scan ~/Downloads --kinds content -d 3 -a

  Save the result and render a Markdown report from it
  %(prog)s scan ~/Downloads -o scan.json
  %(prog)s report -i scan.json -o report.md

  Keep one file per content group and delete the rest (backed up, with confirmation)
  %(prog)s scan ~/Downloads --kinds content --keep-one

  Review and revert deletions
  %(prog)s undo list
  %(prog)s undo restore <ID>
"""
