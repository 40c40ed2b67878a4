"""
BananaMoney Lite — Bot Module

Components:
    controller.py  — connection lifecycle, reconnect, console routing
    commands.py    — `!command` dispatch
    autosell.py    — periodic sell command
    bones.py       — drop collection around the spawner
    gui.py         — open-window inspection and clicks
    timers.py      — loop timers with cancel handles
    main.py        — entry point
"""

from src.bot.timers import LoopScheduler, Scheduler, TimerHandle
from src.bot.autosell import AutoSell
from src.bot.bones import BoneCollector
from src.bot.gui import GuiManager
from src.bot.commands import CommandDispatcher
from src.bot.controller import SessionController
