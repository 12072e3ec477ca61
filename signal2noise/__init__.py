"""signal2noise - daily task triage: separate the signal from the noise."""
