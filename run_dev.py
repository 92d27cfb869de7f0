"""Simple development runner: starts the admin servers and the Flask dev server.
Use this for manual smoke testing only.
"""
from userapi.server import main

if __name__ == '__main__':
    main()
