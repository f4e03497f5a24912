#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Bridge between mbed Device Connector callbacks and browser clients

  wb.connector_web.lib     - constants and configuration loading
  wb.connector_web.server  - correlation table, callback router, fan-out relay, HTTP app
  wb.connector_web.cli     - operator command line
"""
