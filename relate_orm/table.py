class table:
    """Class decorator naming an entity's table and its naming convention.

    Example:
        @table(name="blog_posts", underscored=True)
        class BlogPost(Entity):
            title = Field(str)
    """

    def __init__(self, name='', underscored=False):
        self.name = name
        self.underscored = underscored

    def __call__(self, cls):
        if self.name:
            cls._table_name = self.name
        cls._underscored = self.underscored
        cls.refresh_attributes()
        return cls
