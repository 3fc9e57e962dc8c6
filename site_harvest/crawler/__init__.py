"""site_harvest.crawler: обход домена, извлечение ссылок и загрузка ресурсов."""
