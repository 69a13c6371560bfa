# Copyright 2026 hgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""hgen: schema compiler for Rust, TypeScript and Dart."""

__version__ = "0.1.0"
