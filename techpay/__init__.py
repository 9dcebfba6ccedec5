"""Technician payroll split calculations"""
