#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Generate attendee labels, label sheets and circle number sheets from a CSV file.
"""

import attendee_label_sheets.cli


if __name__ == "__main__":
	attendee_label_sheets.cli.main()
