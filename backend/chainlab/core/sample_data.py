"""Sample Database — seed script for an empty table store."""

SAMPLE_DATABASE_SQL = """
-- users
CREATE TABLE users (
  id INTEGER PRIMARY KEY,
  username TEXT NOT NULL,
  email TEXT NOT NULL,
  created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- weather observations
CREATE TABLE weather_records (
  id INTEGER PRIMARY KEY,
  city_name TEXT NOT NULL,
  city_id TEXT NOT NULL,
  temperature REAL NOT NULL,
  weather_condition TEXT NOT NULL,
  recorded_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

INSERT INTO users (id, username, email) VALUES
  (1, 'user1', 'user1@example.com'),
  (2, 'user2', 'user2@example.com'),
  (3, 'user3', 'user3@example.com');

INSERT INTO weather_records (id, city_name, city_id, temperature, weather_condition) VALUES
  (1, 'Beijing', '101010100', 25.5, 'Sunny'),
  (2, 'Shanghai', '101020100', 28.2, 'Cloudy'),
  (3, 'Guangzhou', '101280101', 30.1, 'Showers');
"""

SAMPLE_TABLES = ("users", "weather_records")
