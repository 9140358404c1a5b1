# Copyright 2025 IBM Corp.
# Licensed under the Apache License, Version 2.0

from dcmigrate.cli import main

if __name__ == "__main__":
    main()
