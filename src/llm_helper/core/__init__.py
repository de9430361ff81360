"""
Session and backend negotiation for the llm-helper chat panel.
"""
