"""
Allow running the backend as a module: python -m neuroface
"""
from neuroface.run import main

if __name__ == "__main__":
    main()
