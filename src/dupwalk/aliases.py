from dupwalk.core.models import ErrorPolicy, HashAlgorithmName, ScanStrategy

STRATEGY_ALIASES = {
    "fanout": ScanStrategy.FANOUT,
    "pool": ScanStrategy.POOL,
    "sequential": ScanStrategy.SEQUENTIAL,
}

STRATEGY_CHOICES = list(STRATEGY_ALIASES.keys())

STRATEGY_HELP_TEXT = (
    "Scan strategy:\n"
    "  fanout     : One task per subdirectory and per file (default)\n"
    "  pool       : One walking thread feeding a fixed pool of hashing workers\n"
    "  sequential : Walk and hash on a single thread\n"
)

ALGORITHM_ALIASES = {
    "xxh64": HashAlgorithmName.XXH64,
    "xxh128": HashAlgorithmName.XXH128,
    "md5": HashAlgorithmName.MD5,
}

ALGORITHM_CHOICES = list(ALGORITHM_ALIASES.keys())

ERROR_POLICY_ALIASES = {
    "fail-fast": ErrorPolicy.FAIL_FAST,
    "collect": ErrorPolicy.COLLECT,
}

ERROR_POLICY_CHOICES = list(ERROR_POLICY_ALIASES.keys())

ERROR_POLICY_HELP_TEXT = (
    "What an unreadable directory or file does to the run:\n"
    "  fail-fast : Abort the whole run, print no groups (default)\n"
    "  collect   : Skip it, print all other groups and list the failures\n"
)

EPILOG_TEXT = """
Examples:
  Basic usage - find duplicates in Downloads folder
  %(prog)s -i ~/Downloads

  Limit simultaneous open files/directories to 8
  %(prog)s -i ~/Downloads -j 8

  Keep going past unreadable files and list them at the end
  %(prog)s -i /srv/share --on-error collect

  MD5 fingerprints, walking and hashing on a single thread
  %(prog)s -i ~/Downloads --strategy sequential --algorithm md5
"""
