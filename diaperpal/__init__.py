"""DiaperPal: find baby changing stations at nearby venues."""
