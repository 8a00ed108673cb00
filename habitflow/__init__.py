#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HabitFlow - personal habit tracker
Habits, daily completion logs, streaks, statistics and XP levels

Version: 1.0.0
"""

__version__ = "1.0.0"
