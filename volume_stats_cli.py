#!/usr/bin/env python3
"""
Broker Volume Usage Report

Prints how full each broker's persistent volume is, using the kubelet
stats summary of the node each broker pod runs on.
"""

from volume_stats.cli import run

if __name__ == "__main__":
    run()
