"""
Lets `python -m partapp FILE` behave like the `partapp` command.
"""
from partapp.cmdline import main

main()
