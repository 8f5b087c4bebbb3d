import sys

from studentcms.cli.studentcmscli import main

if __name__ == "__main__":
    sys.exit(main())
