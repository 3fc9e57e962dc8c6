"""site_harvest.parser: преобразование HTML в текст и markdown."""
