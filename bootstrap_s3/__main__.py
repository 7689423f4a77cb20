import sys

from bootstrap_s3.cli import main

sys.exit(main())
