"""
parmatch - unbound parameter finder for Verilog/SystemVerilog

Scans HDL sources as a token stream (no syntax tree), collects module
parameter signatures, and reports instantiations that leave parameters
unassigned.
"""

__version__ = "0.1.0"
__author__ = "parmatch contributors"

from parmatch.runner import AnalysisResult, analyze, run
