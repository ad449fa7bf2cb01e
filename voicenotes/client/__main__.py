import sys

from voicenotes.client.cli import main

sys.exit(main())
