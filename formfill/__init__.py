"""Identity Document Form-Fill Assistant.

Extracts personal details from scans of Indian identity documents
(Aadhaar, PAN, Voter ID, Driving License) through a hosted vision model,
reconciles multiple documents into one profile, and validates and exports
the result for review.
"""
