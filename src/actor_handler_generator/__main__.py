import sys

from actor_handler_generator.cli import main

sys.exit(main())
