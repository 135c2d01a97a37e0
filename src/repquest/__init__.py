"""RepQuest progression service: points, levels and badges for youth sports drills."""
