#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Bridge core

  correlation  - async-response-id -> waiting read (one-shot, with deadline)
  router       - callback bodies -> correlation table / fan-out relay
  relay        - fan-out of device events to Socket.IO clients
  status       - "read device value" request orchestration
  commands     - browser commands -> device cloud writes
  cloud        - device cloud API clients
"""
