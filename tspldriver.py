#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Print PDF label sheets on a TSPL thermal printer.

Installed as a spooler backend ("tspl") or filter ("tspl-filter") the same
script switches role from its name.
"""

import tspl_label_driver.cli


if __name__ == "__main__":
	tspl_label_driver.cli.main()
