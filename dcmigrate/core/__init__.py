# Copyright 2025 IBM Corp.
# Licensed under the Apache License, Version 2.0
